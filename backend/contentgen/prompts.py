"""Prompt construction for Korean literacy content.

Everything here is a pure function over static tables: the instruction body per
content type, the difficulty and grade descriptions, and the JSON shape the
model is asked to mirror in its reply.
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence


BASE_INSTRUCTIONS: Dict[str, str] = {
	"vocabulary": (
		"지문에서 어려운 어휘를 추출하고 분석해주세요.\n"
		"각 어휘의 의미, 유의어, 반의어, 난이도를 포함해야 합니다."
	),
	"grammar": (
		"한국어 문법 학습 자료를 생성해주세요.\n"
		"문법 규칙의 명확한 설명, 다양한 예문, 주의사항을 포함해야 합니다."
	),
	"reading": (
		"한국어 읽기 지문을 생성해주세요.\n"
		"사용자가 요청한 주제에 대해 해당 연령과 수준에 맞는 지문을 정확한 글자 수로 작성해야 합니다.\n"
		"지문은 교육적 가치가 있고 학생들이 흥미를 느낄 수 있는 내용이어야 합니다."
	),
	"analysis": (
		"다음 지문의 문해력 난이도를 상세히 분석해주세요.\n"
		"텍스트 길이, 어휘 수준, 문장 복잡도, 내용 수준, 배경지식 요구도를 각각 1-10점으로 평가하고,\n"
		"해당 학년 수준에 맞는지 판단하여 구체적인 개선 방안을 제시해야 합니다."
	),
	"vocabulary_extraction": (
		"다음 지문에서 해당 학년에게 어려울 만한 핵심 어휘를 추출하고 분석해주세요.\n"
		"각 어휘는 한자어 기반으로 쉽게 풀이하고, 예문, 유의어/반의어(있는 경우만)를 포함해야 합니다.\n"
		"학년 수준에 적합한지도 판단해주세요."
	),
	"reading_problems": (
		"다음 지문을 바탕으로 문해력 훈련 문제를 생성해주세요.\n"
		"객관식 문제 서너 개와 한두 문장으로 답할 수 있는 서술형 문제 한두 개를 포함해야 합니다.\n"
		"각 문제는 정답과 상세한 해설을 포함해야 합니다."
	),
	"questions": (
		"지문 기반 서술형 문제를 생성해주세요.\n"
		"맥락 추론형과 내용 이해형 문제를 포함해야 합니다."
	),
	"answers": (
		"문제에 대한 상세한 해설을 작성해주세요.\n"
		"정답, 해설, 채점 기준, 학습 팁을 포함해야 합니다."
	),
	"quiz": (
		"한국어 학습 퀴즈를 생성해주세요.\n"
		"다양한 유형의 문제와 명확한 정답, 해설을 포함해야 합니다."
	),
}

DIFFICULTY_GUIDES: Dict[str, str] = {
	"beginner": "초급자용 (한글을 읽을 수 있고 기본 단어 오백 개 정도 아는 수준)",
	"intermediate": "중급자용 (일상 대화가 가능하고 기본 문법을 아는 수준)",
	"advanced": "고급자용 (복잡한 문장을 이해하고 뉘앙스를 구분할 수 있는 수준)",
}

AGE_GUIDES: Dict[str, str] = {
	"elem1": "초등학교 1학년 (7세)",
	"elem2": "초등학교 2학년 (8세)",
	"elem3": "초등학교 3학년 (9세)",
	"elem4": "초등학교 4학년 (10세)",
	"elem5": "초등학교 5학년 (11세)",
	"elem6": "초등학교 6학년 (12세)",
	"middle1": "중학교 1학년 (13세)",
	"middle2": "중학교 2학년 (14세)",
	"middle3": "중학교 3학년 (15세)",
	"high1": "고등학교 1학년 (16세)",
	"high2": "고등학교 2학년 (17세)",
	"high3": "고등학교 3학년 (18세)",
}

JSON_SHAPES: Dict[str, str] = {
	"reading": """{
  "title": "읽기 지문 제목",
  "description": "지문에 대한 간단한 설명",
  "mainContent": {
    "introduction": "사용자가 요청한 주제에 대해 정확히 요청된 글자 수로 작성된 읽기 지문 내용. 해당 학년 수준에 맞는 어휘와 문체로 작성되어야 함."
  },
  "metadata": {
    "characterCount": "실제 글자 수",
    "gradeLevel": "대상 학년",
    "topic": "실제 주제",
    "difficulty": "난이도"
  }
}""",
	"analysis": """{
  "title": "문해력 난이도 분석 결과",
  "analysis": {
    "textLength": "텍스트 길이 점수 (1-10)",
    "vocabularyLevel": "어휘 난이도 점수 (1-10)",
    "sentenceComplexity": "문장 복잡도 점수 (1-10)",
    "contentLevel": "내용 수준 점수 (1-10)",
    "backgroundKnowledge": "배경지식 요구도 점수 (1-10)",
    "totalScore": "전체 난이도 점수 (1-10)"
  },
  "feedback": "학년 수준에 맞는지에 대한 상세한 분석과 개선 제안",
  "recommendations": [
    "구체적인 개선 방안 1",
    "구체적인 개선 방안 2"
  ]
}""",
	"vocabulary_extraction": """{
  "title": "어휘 분석 결과",
  "vocabularyList": [
    {
      "word": "어휘",
      "meaning": "한자어 기반 쉬운 풀이",
      "etymology": "한자어 어원 (있는 경우)",
      "synonyms": ["유의어1", "유의어2"],
      "antonyms": ["반의어1", "반의어2"],
      "difficulty": "★★★☆☆",
      "example": "예문",
      "gradeAppropriate": true
    }
  ]
}""",
	"reading_problems": """{
  "title": "문해력 문제",
  "problems": [
    {
      "type": "multiple_choice",
      "question": "문제 내용",
      "options": ["선택지1", "선택지2", "선택지3", "선택지4"],
      "correctAnswer": 0,
      "explanation": "정답 해설"
    },
    {
      "type": "short_answer",
      "question": "서술형 문제 내용 (1-2문장으로 답할 수 있는)",
      "expectedLength": "1-2문장",
      "sampleAnswer": "예시 답안",
      "gradingCriteria": ["채점 기준 1", "채점 기준 2"],
      "explanation": "문제 해설"
    }
  ]
}""",
	"vocabulary": """{
  "title": "어휘 분석 결과",
  "vocabularyList": [
    {
      "word": "어휘",
      "meaning": "한자어 기반 쉬운 풀이",
      "synonyms": ["유의어1", "유의어2"],
      "antonyms": ["반의어1", "반의어2"],
      "difficulty": "★★★★☆",
      "example": "예문"
    }
  ]
}""",
	"questions": """{
  "title": "서술형 문제",
  "questions": [
    {
      "type": "맥락 추론형",
      "question": "문제 내용",
      "answerSpace": 3,
      "points": 10
    },
    {
      "type": "내용 이해형",
      "question": "문제 내용",
      "answerSpace": 4,
      "points": 10
    }
  ]
}""",
	"answers": """{
  "title": "문제 해설",
  "answers": [
    {
      "questionNumber": 1,
      "correctAnswer": "예시 정답",
      "explanation": "상세한 해설",
      "gradingCriteria": ["채점 기준 1", "채점 기준 2"],
      "tips": "학습 팁"
    }
  ]
}""",
}

# grammar, quiz and anything new share the generic lesson object
LESSON_SHAPE = """{
  "title": "학습 자료 제목",
  "description": "학습 자료에 대한 간단한 설명",
  "mainContent": {
    "introduction": "도입부 설명",
    "keyPoints": [
      "핵심 포인트 1",
      "핵심 포인트 2",
      "핵심 포인트 3"
    ],
    "examples": [
      {
        "korean": "한국어 예문",
        "romanization": "로마자 표기 (초급자용일 때만)",
        "english": "영어 번역",
        "explanation": "설명"
      }
    ]
  },
  "exercises": [
    {
      "type": "multiple-choice",
      "question": "문제",
      "options": ["선택지1", "선택지2", "선택지3", "선택지4"],
      "correctAnswer": 0,
      "explanation": "정답 설명"
    }
  ],
  "additionalNotes": [
    "추가 학습 팁이나 주의사항"
  ]
}"""

CLOSING_RULE = "중요: 반드시 유효한 JSON 형식으로만 응답하고, 추가 설명은 JSON 내부에 포함시켜주세요."

_PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z0-9_]+)\s*\}\}")


@dataclass(frozen=True)
class PromptBundle:
	instruction: str
	json_shape: str

	@property
	def text(self) -> str:
		return (
			f"{self.instruction}\n\n"
			"다음 JSON 형식으로 정확히 응답해주세요:\n\n"
			f"{self.json_shape}\n\n"
			f"{CLOSING_RULE}"
		)


def describe_difficulty(difficulty: str) -> str:
	return DIFFICULTY_GUIDES.get(difficulty, difficulty)


def describe_audience(target_audience: str) -> str:
	# Unknown tokens (e.g. "adult" or a bare age) pass through verbatim
	return AGE_GUIDES.get(target_audience, target_audience)


def json_shape_for(content_type: str) -> str:
	return JSON_SHAPES.get(content_type, LESSON_SHAPE)


def _count_phrase(item_count: Optional[int]) -> str:
	return f"{item_count}개" if item_count else "다섯 개"


def _passage_instruction(
	content_type: str,
	prompt_text: str,
	target_audience: str,
	difficulty: str,
	item_count: Optional[int] = None,
	problem_types: Sequence[str] = (),
) -> str:
	base = BASE_INSTRUCTIONS[content_type]
	audience = f"- 대상 연령: {target_audience} ({describe_audience(target_audience)})"
	if content_type == "analysis":
		return (
			f"{base}\n\n"
			f"분석할 지문:\n\"{prompt_text}\"\n\n"
			"설정:\n"
			f"{audience}\n"
			f"- 난이도 기준: {difficulty} ({describe_difficulty(difficulty)})\n\n"
			"**분석 기준**:\n"
			"1. 텍스트 길이: 해당 학년이 읽기에 적절한 분량인지\n"
			"2. 어휘 수준: 사용된 단어들이 학년 수준에 맞는지\n"
			"3. 문장 복잡도: 문장 구조의 복잡성 평가\n"
			"4. 내용 수준: 주제와 개념의 추상성 정도\n"
			"5. 배경지식: 이해에 필요한 사전 지식 요구도"
		)
	if content_type == "vocabulary_extraction":
		return (
			f"{base}\n\n"
			f"지문:\n\"{prompt_text}\"\n\n"
			"설정:\n"
			f"{audience}\n"
			f"- 추출할 어휘 수: {_count_phrase(item_count)}\n\n"
			"**추출 기준**:\n"
			"- 해당 학년에게 다소 어려울 수 있는 핵심 어휘\n"
			"- 교육적 가치가 있는 중요한 단어\n"
			"- 한자어는 어원을 활용한 쉬운 설명\n"
			"- 일상에서 활용 가능한 실용적 어휘"
		)
	requested_types = f"- 요청한 문제 유형: {', '.join(problem_types)}\n" if problem_types else ""
	return (
		f"{base}\n\n"
		f"지문:\n\"{prompt_text}\"\n\n"
		"설정:\n"
		f"{audience}\n"
		f"- 문제 수: {_count_phrase(item_count)}\n"
		"- 문제 구성: 객관식 서너 개, 서술형 한두 개\n"
		f"{requested_types}\n"
		"**문제 유형**:\n"
		"1. 내용 이해형 (객관식): 지문의 핵심 내용 파악\n"
		"2. 어휘 이해형 (객관식): 중요 단어의 의미\n"
		"3. 추론형 (객관식/서술형): 글의 의도나 화자의 생각\n"
		"4. 서술형: 한두 문장으로 답할 수 있는 간단한 문제"
	)


def build_prompt(
	prompt_text: str,
	content_type: str,
	*,
	difficulty: str = "intermediate",
	target_audience: str = "elem1",
	desired_length: int = 800,
	item_count: Optional[int] = None,
	problem_types: Sequence[str] = (),
) -> PromptBundle:
	if content_type in ("analysis", "vocabulary_extraction", "reading_problems"):
		instruction = _passage_instruction(
			content_type, prompt_text, target_audience, difficulty, item_count, problem_types
		)
		return PromptBundle(instruction=instruction, json_shape=json_shape_for(content_type))

	base = BASE_INSTRUCTIONS.get(content_type, BASE_INSTRUCTIONS["vocabulary"])
	lines = [
		base,
		"",
		f"사용자 요청: \"{prompt_text}\"",
		"",
		"설정:",
		f"- 난이도: {difficulty} ({describe_difficulty(difficulty)})",
		f"- 대상 연령: {target_audience} ({describe_audience(target_audience)})",
	]
	if content_type == "reading":
		lines.append(f"- 글자 수: 정확히 {desired_length}자")
		lines.append("")
		lines.append(
			f"**중요**: 지문은 반드시 {desired_length}자로 작성해주세요. "
			"해당 학년 수준에 맞는 어휘와 문체를 사용하여 학생이 이해할 수 있는 내용으로 만들어주세요."
		)
	return PromptBundle(instruction="\n".join(lines), json_shape=json_shape_for(content_type))


def fill_template(template_prompt: str, variables: Mapping[str, object]) -> str:
	"""Replace ``{{name}}`` placeholders; unknown placeholders are left in place."""

	def _sub(match: "re.Match[str]") -> str:
		name = match.group(1)
		if name in variables:
			return str(variables[name])
		return match.group(0)

	return _PLACEHOLDER_RE.sub(_sub, template_prompt)
