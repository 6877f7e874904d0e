from __future__ import annotations

from marketlens.services.insight_parser import (
    clean_bullet,
    match_section_header,
    parse_insight_response,
    parse_reference_list,
)

RESPONSE = """## 핵심 인사이트
1. 배터리 가격이 빠르게 하락하고 있습니다
2. 충전 인프라 투자가 확대되고 있습니다
참고: [1, 3, 5]

## 성공 사례
• 테슬라의 직판 모델
참고: [2]

## 실패 사례
• 니콜라의 수소 트럭 사업
참고 : [4, 6]

## 향후 시장 전망
1) 배터리 재활용 시장의 성장
"""


def test_sections_and_references():
    parsed = parse_insight_response(RESPONSE)

    assert parsed.insights == [
        "배터리 가격이 빠르게 하락하고 있습니다",
        "충전 인프라 투자가 확대되고 있습니다",
    ]
    assert parsed.success_cases == ["테슬라의 직판 모델"]
    assert parsed.failure_cases == ["니콜라의 수소 트럭 사업"]
    assert parsed.market_outlook == ["배터리 재활용 시장의 성장"]
    assert parsed.insights_refs == [1, 3, 5]
    assert parsed.success_refs == [2]
    assert parsed.failure_refs == [4, 6]
    assert parsed.outlook_refs == []


def test_unmarked_lines_are_discarded():
    parsed = parse_insight_response(
        "1. 헤더 이전의 줄\n## 핵심 인사이트\n이 문장은 번호가 없습니다\n• 번호가 있는 문장\n"
    )

    assert parsed.insights == ["번호가 있는 문장"]


def test_english_headers():
    parsed = parse_insight_response("Key Insights\n• 수요 증가\nMarket Outlook\n2. 성장 지속\n")

    assert parsed.insights == ["수요 증가"]
    assert parsed.market_outlook == ["성장 지속"]


def test_reference_line_before_any_section_is_ignored():
    parsed = parse_insight_response("참고: [1, 2]\n## 성공 사례\n• 사례\n")

    assert parsed.insights_refs == []
    assert parsed.success_refs == []


def test_match_section_header_order():
    assert match_section_header("## 핵심 인사이트") == "insights"
    assert match_section_header("### 성공사례") == "success_cases"
    assert match_section_header("Failure cases") == "failure_cases"
    assert match_section_header("## 시장 전망") == "market_outlook"
    assert match_section_header("그 밖의 내용") is None


def test_parse_reference_list():
    assert parse_reference_list("참고: [1, 3, 5]") == [1, 3, 5]
    assert parse_reference_list("참고: [7]") == [7]
    assert parse_reference_list("참고: 없음") is None


def test_clean_bullet_strips_marker():
    assert clean_bullet("3. 시장 확대") == "시장 확대"
    assert clean_bullet("* 시장 확대") == "시장 확대"
    assert clean_bullet("• 시장 확대") == "시장 확대"
    # Latin letters right after the marker fall inside the `.-•` range.
    assert clean_bullet("1. EV 시장 확대") == "시장 확대"


def test_hyphen_bullet_is_kept_verbatim():
    # `-` is the range operator in the prefix class, not a member of it.
    assert clean_bullet("- 시장 확대") == "- 시장 확대"
    parsed = parse_insight_response("## 성공 사례\n- 직판 모델\n")
    assert parsed.success_cases == ["- 직판 모델"]
