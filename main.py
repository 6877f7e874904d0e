"""MarketLens - market research from the command line.

Simple CLI for running research queries.
"""

import argparse
import asyncio

from marketlens.services.research_service import ResearchService


async def run_research(query: str):
    """Run research on the given query."""
    print(f"Research query: {query}")
    print("-" * 50)

    service = ResearchService()
    request_id = service.submit(query)

    async for event in service.subscribe(request_id):
        data = event.data
        line = f"[~] {data.get('status')}: {data.get('message', '')}"
        if "results_count" in data:
            line += f" (results: {data['results_count']})"
        if "clusters_count" in data:
            line += f" (topics: {data['clusters_count']})"
        print(line)
        if data.get("error"):
            print(f"\n[!] Error: {data['error']}")

    state = service.fetch(request_id)
    if state is None or state.insights is None:
        return

    print(f"\n{'='*50}")
    print(f"TOPICS ({len(state.clusters)}):")
    print(f"{'='*50}")
    for cluster in state.clusters:
        print(f"  - {cluster.name} [{cluster.size} docs] {', '.join(cluster.keywords)}")

    sections = (
        ("Key insights", state.insights.insights),
        ("Success cases", state.insights.success_cases),
        ("Failure cases", state.insights.failure_cases),
        ("Market outlook", state.insights.market_outlook),
    )
    for title, items in sections:
        print(f"\n[*] {title}:")
        for i, item in enumerate(items, 1):
            print(f"  {i}. {item}")


def main():
    parser = argparse.ArgumentParser(description="MarketLens market research tool")
    parser.add_argument("--query", "-q", required=True, help="Research query")

    args = parser.parse_args()

    asyncio.run(run_research(args.query))


if __name__ == "__main__":
    main()
