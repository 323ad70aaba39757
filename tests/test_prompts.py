import pytest

from contentgen.prompts import (
	AGE_GUIDES,
	CLOSING_RULE,
	LESSON_SHAPE,
	build_prompt,
	describe_audience,
	fill_template,
	json_shape_for,
)
from contentgen.schemas import CONTENT_TYPES


def test_reading_prompt_states_exact_length():
	bundle = build_prompt("봄에 피는 꽃", "reading", difficulty="beginner", target_audience="elem2", desired_length=777)

	assert "정확히 777자" in bundle.text
	assert "반드시 777자" in bundle.text
	assert "봄에 피는 꽃" in bundle.text
	assert AGE_GUIDES["elem2"] in bundle.text
	assert bundle.text.endswith(CLOSING_RULE)


@pytest.mark.parametrize("content_type", [t for t in CONTENT_TYPES if t != "reading"])
@pytest.mark.parametrize("difficulty", ["beginner", "intermediate", "advanced"])
@pytest.mark.parametrize("length", [500, 777, 1200, 3000])
def test_length_only_mentioned_for_reading(content_type, difficulty, length):
	bundle = build_prompt("봄에 피는 꽃", content_type, difficulty=difficulty, desired_length=length)

	assert str(length) not in bundle.text


def test_passage_prompts_carry_requested_count_and_types():
	problems = build_prompt(
		"지문", "reading_problems", item_count=7, problem_types=("comprehension", "inference")
	).text
	assert "- 문제 수: 7개" in problems
	assert "- 요청한 문제 유형: comprehension, inference" in problems

	vocabulary = build_prompt("지문", "vocabulary_extraction").text
	assert "- 추출할 어휘 수: 다섯 개" in vocabulary


def test_unknown_audience_passes_through():
	assert describe_audience("adult") == "adult"

	bundle = build_prompt("시장 구경", "grammar", target_audience="adult")
	assert "- 대상 연령: adult (adult)" in bundle.text


def test_passage_types_quote_the_passage():
	passage = "개나리는 노란색으로 먼저 핍니다."
	for content_type in ("analysis", "vocabulary_extraction", "reading_problems"):
		bundle = build_prompt(passage, content_type, target_audience="elem3")
		assert f'"{passage}"' in bundle.text
		assert AGE_GUIDES["elem3"] in bundle.text


def test_generic_types_share_lesson_shape():
	assert json_shape_for("grammar") == LESSON_SHAPE
	assert json_shape_for("quiz") == LESSON_SHAPE
	assert '"vocabularyList"' in json_shape_for("vocabulary")


def test_fill_template_keeps_unknown_placeholders():
	prompt = fill_template("{{topic}}에 대한 {{ grade }} 지문, {{missing}}", {"topic": "우주", "grade": 3})

	assert prompt == "우주에 대한 3 지문, {{missing}}"
