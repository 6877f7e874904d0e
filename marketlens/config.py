from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # OpenAI-compatible endpoint (chat + embeddings)
    openai_api_key: str = ""
    openai_base_url: str = ""  # empty = api.openai.com
    default_model: str = "gpt-4"
    insight_temperature: float = 0.7
    insight_max_tokens: int = 4096
    naming_max_tokens: int = 64
    embedding_model: str = "text-embedding-3-small"
    embedding_batch_size: int = 64

    # Tavily
    tavily_api_key: str = ""
    search_depth: str = "advanced"  # basic | advanced
    max_search_results: int = 30
    max_results_per_domain: int = 5

    # Clustering / keywords
    min_documents_for_clustering: int = 5
    min_clusters: int = 2
    max_clusters: int = 5
    kmeans_seed: int = 42
    min_cluster_size: int = 2
    cluster_keywords_top_k: int = 5
    representative_documents: int = 3

    # Progress streaming / state lifecycle
    stream_poll_interval_ms: int = 100
    state_ttl_seconds: int = 3600  # terminal snapshots are evicted after this

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_dir: str = "logs"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


settings = Settings()
