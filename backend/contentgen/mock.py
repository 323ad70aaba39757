"""Canned answers used when a provider has no usable credential.

The samples only exist so the editor can be exercised offline. Topic selection
is a plain keyword lookup over the request text.
"""

from __future__ import annotations
import copy
import logging
import math
from typing import Any, Dict, List, Tuple

from .schemas import GenerationRequest, NormalizedResult, StructuredContent, canonical_provider


logger = logging.getLogger(__name__)


TOPIC_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
	("game", ("게임", "기술", "컴퓨터", "로봇", "인공지능", "ai")),
	("sports", ("스포츠", "축구", "운동", "농구", "수영")),
	("nature", ("동물", "자연", "환경", "꽃", "봄", "숲")),
]
DEFAULT_TOPIC = "nature"

READING_SAMPLES: Dict[str, Dict[str, Any]] = {
	"game": {
		"title": "게임과 기술",
		"topic": "게임 & 기술",
		"base": "요즘 컴퓨터 게임은 정말 재미있습니다. 스마트폰이나 컴퓨터로 여러 가지 게임을 할 수 있어요. 게임을 하면 친구들과 함께 즐길 수 있고, 새로운 것을 배울 수도 있습니다. 하지만 게임을 할 때는 시간을 정해서 해야 해요. 너무 오래 하면 눈이 아프고 공부할 시간이 부족해집니다. 게임은 재미있지만 적당히 하는 것이 좋습니다.",
		"additional": " 게임을 만드는 사람들을 개발자라고 부릅니다. 이들은 컴퓨터 프로그래밍을 배워서 재미있는 게임을 만들어요. 미래에는 더욱 발달한 기술로 더 재미있는 게임들이 나올 것입니다. 가상현실 게임이나 로봇과 함께 하는 게임도 있어요. 기술이 발전하면 우리 생활이 더욱 편리해집니다.",
		"extra": " 로봇 기술도 많이 발전했습니다. 집에서 청소를 도와주는 로봇이나 음성으로 대화할 수 있는 AI도 있어요. 인공지능은 사람처럼 생각하고 배울 수 있는 기술입니다. 앞으로 로봇이 더 똑똑해져서 우리 생활을 많이 도와줄 것입니다.",
		"padding": " 기술은 우리 생활을 더욱 편리하게 만들어 줍니다.",
		"keyPoints": [
			"컴퓨터 게임은 재미있는 놀이입니다",
			"기술 발전으로 게임이 더 발달했습니다",
			"게임을 할 때는 시간을 지켜야 합니다",
		],
		"examples": [{"korean": "친구들과 함께 게임을 하면 더 재미있어요.", "explanation": "협동하는 게임의 즐거움"}],
	},
	"sports": {
		"title": "스포츠와 건강",
		"topic": "스포츠",
		"base": "운동은 우리 몸을 건강하게 만들어 줍니다. 축구, 농구, 수영 등 여러 가지 스포츠가 있어요. 친구들과 함께 운동을 하면 더욱 재미있습니다. 운동을 하면 근육이 강해지고 심장도 건강해집니다. 매일 조금씩이라도 몸을 움직이는 것이 좋아요. 운동은 스트레스를 줄여주고 기분을 좋게 만들어 줍니다.",
		"additional": " 팀 스포츠를 하면 협동심을 기를 수 있어요. 서로 도와주고 응원하면서 함께 목표를 달성하는 기쁨을 느낄 수 있습니다. 올림픽이나 월드컵 같은 큰 대회를 보면서 선수들의 노력과 열정을 배울 수 있어요.",
		"extra": " 운동선수가 되려면 어릴 때부터 꾸준히 연습해야 합니다. 건강한 몸과 강한 정신력이 필요해요. 우리도 매일 운동하는 습관을 기르면 건강하고 행복한 생활을 할 수 있습니다.",
		"padding": " 운동은 건강한 생활의 기초가 됩니다.",
		"keyPoints": ["운동은 우리 몸을 건강하게 합니다", "여러 가지 스포츠가 있습니다", "팀워크가 중요합니다"],
		"examples": [{"korean": "축구를 하면 다리 근육이 강해져요.", "explanation": "운동과 건강의 관계"}],
	},
	"nature": {
		"title": "동물과 자연",
		"topic": "동물 & 자연",
		"base": "따뜻한 봄이 오면 여러 가지 예쁜 꽃들이 피어납니다. 개나리는 노란색으로 먼저 피고, 진달래는 분홍색으로 예쁘게 핍니다. 벚꽃은 하얀색과 분홍색으로 피어서 마치 눈이 내린 것 같아요. 꽃들은 우리에게 봄이 왔다고 알려주는 친구들입니다. 꽃들을 보면 마음이 기뻐집니다. 우리는 꽃을 소중히 여겨야 해요. 꽃을 꺾지 말고 예쁘게 구경만 해야 합니다. 꽃들도 우리처럼 살아있는 생명이기 때문입니다.",
		"additional": " 봄에는 가족과 함께 꽃구경을 가면 좋겠어요. 공원이나 산에 가서 여러 가지 꽃들을 찾아보세요. 꽃의 색깔과 모양을 자세히 관찰해보면 정말 신기합니다. 자연은 우리에게 아름다운 선물을 주는 것 같아요. 꽃향기를 맡아보고, 나비나 벌들이 꽃을 찾아오는 모습도 관찰해보세요. 계절이 바뀌면서 피는 꽃들도 달라집니다.",
		"extra": " 여름에는 해바라기와 장미가 피고, 가을에는 코스모스와 국화가 아름답게 핍니다. 겨울에는 동백꽃이 추위를 이겨내며 붉게 피어납니다. 우리나라에는 정말 다양한 꽃들이 사계절 내내 피어나므로 언제든지 아름다운 자연을 만날 수 있습니다. 꽃을 통해 자연의 신비로움과 생명의 소중함을 배울 수 있어요.",
		"padding": " 자연은 우리 생활에 기쁨과 아름다움을 가져다줍니다.",
		"keyPoints": [
			"자연에는 많은 동물들과 식물들이 살고 있습니다",
			"꽃마다 색깔과 모양이 다릅니다",
			"자연을 보호해야 합니다",
		],
		"examples": [{"korean": "개나리가 노랗게 피었어요.", "explanation": "봄에 가장 먼저 피는 노란 꽃"}],
	},
}

VOCABULARY_SAMPLE: Dict[str, Any] = {
	"title": "어휘 분석 결과",
	"vocabularyList": [
		{
			"word": "관찰",
			"meaning": "자세히 살펴보는 것",
			"synonyms": ["구경", "살피기"],
			"antonyms": ["무시", "소홀"],
			"difficulty": "★★★☆☆",
			"example": "꽃을 관찰해보세요.",
		},
		{
			"word": "생명",
			"meaning": "살아있는 것",
			"synonyms": ["목숨", "삶"],
			"antonyms": ["죽음"],
			"difficulty": "★★☆☆☆",
			"example": "꽃도 생명이에요.",
		},
		{
			"word": "아름다운",
			"meaning": "보기 좋고 예쁜",
			"synonyms": ["예쁜", "고운"],
			"antonyms": ["추한"],
			"difficulty": "★★☆☆☆",
			"example": "아름다운 꽃이 피었어요.",
		},
	],
}

VOCABULARY_EXTRACTION_SAMPLE: Dict[str, Any] = {
	"title": "어휘 분석 결과",
	"vocabularyList": [
		{
			"word": "관찰",
			"meaning": "자세히 살펴보는 것",
			"etymology": "觀(볼 관) + 察(살필 찰)",
			"synonyms": ["구경", "살피기"],
			"antonyms": ["무시", "소홀"],
			"difficulty": "★★★☆☆",
			"example": "과학자는 현미경으로 세포를 관찰했습니다.",
			"gradeAppropriate": True,
		},
		{
			"word": "발전",
			"meaning": "더 나은 상태로 나아가는 것",
			"etymology": "發(발할 발) + 展(펼 전)",
			"synonyms": ["성장", "진보"],
			"antonyms": ["퇴보", "후퇴"],
			"difficulty": "★★☆☆☆",
			"example": "기술의 발전으로 우리 생활이 편리해졌습니다.",
			"gradeAppropriate": True,
		},
		{
			"word": "환경",
			"meaning": "주변을 둘러싸고 있는 모든 조건",
			"etymology": "環(고리 환) + 境(경계 경)",
			"synonyms": ["주변", "여건"],
			"antonyms": [],
			"difficulty": "★★★☆☆",
			"example": "깨끗한 환경을 만들기 위해 쓰레기를 분리수거해야 합니다.",
			"gradeAppropriate": True,
		},
		{
			"word": "중요",
			"meaning": "매우 필요하고 소중한 것",
			"etymology": "重(무거울 중) + 要(요할 요)",
			"synonyms": ["소중", "필수"],
			"antonyms": ["불필요"],
			"difficulty": "★★☆☆☆",
			"example": "건강은 무엇보다 중요합니다.",
			"gradeAppropriate": True,
		},
		{
			"word": "노력",
			"meaning": "목표를 이루기 위해 힘쓰는 것",
			"etymology": "努(힘쓸 노) + 力(힘 력)",
			"synonyms": ["애쓰기", "힘쓰기"],
			"antonyms": ["게으름", "나태"],
			"difficulty": "★★☆☆☆",
			"example": "꾸준한 노력으로 실력이 늘었습니다.",
			"gradeAppropriate": True,
		},
	],
}

QUESTIONS_SAMPLE: Dict[str, Any] = {
	"title": "서술형 문제",
	"questions": [
		{"type": "내용 이해형", "question": "봄에 피는 꽃의 종류를 3가지 써보세요.", "answerSpace": 3, "points": 10},
		{"type": "맥락 추론형", "question": "글쓴이가 꽃을 꺾지 말라고 하는 이유를 써보세요.", "answerSpace": 4, "points": 15},
		{"type": "내용 이해형", "question": "꽃을 관찰할 때 주의할 점을 써보세요.", "answerSpace": 3, "points": 10},
		{"type": "맥락 추론형", "question": "자연이 우리에게 주는 의미를 생각해서 써보세요.", "answerSpace": 5, "points": 20},
	],
}

ANSWERS_SAMPLE: Dict[str, Any] = {
	"title": "문제 해설",
	"answers": [
		{
			"questionNumber": 1,
			"correctAnswer": "개나리, 진달래, 벚꽃",
			"explanation": "지문에서 봄에 피는 꽃으로 개나리(노란색), 진달래(분홍색), 벚꽃(하얀색, 분홍색)을 제시했습니다.",
			"gradingCriteria": ["3가지 꽃 이름 정확히 쓰기", "맞춤법 정확성"],
			"tips": "지문을 차근차근 읽으며 꽃 이름을 찾아보세요.",
		},
		{
			"questionNumber": 2,
			"correctAnswer": "꽃도 우리처럼 살아있는 생명이기 때문입니다.",
			"explanation": "글쓴이는 꽃도 생명체임을 강조하며 생명을 소중히 여겨야 한다고 말합니다.",
			"gradingCriteria": ["생명의 소중함 언급", "논리적 설명"],
			"tips": "지문에서 생명에 관련된 부분을 찾아보세요.",
		},
	],
}

ANALYSIS_SAMPLE: Dict[str, Any] = {
	"title": "문해력 난이도 분석 결과",
	"analysis": {
		"textLength": "7",
		"vocabularyLevel": "6",
		"sentenceComplexity": "5",
		"contentLevel": "7",
		"backgroundKnowledge": "6",
		"totalScore": "6.2",
	},
	"feedback": "이 지문은 해당 학년 수준에 적절한 난이도를 가지고 있습니다. 어휘 수준이 다소 높은 편이므로 사전 어휘 학습을 통해 보완하면 좋겠습니다.",
	"recommendations": [
		"핵심 어휘를 미리 학습한 후 지문을 읽도록 지도",
		"문단별로 나누어 단계적으로 읽기 지도",
		"내용과 관련된 배경지식을 먼저 설명",
	],
}

READING_PROBLEMS_SAMPLE: Dict[str, Any] = {
	"title": "문해력 문제",
	"problems": [
		{
			"type": "multiple_choice",
			"question": "이 글의 주제로 가장 적절한 것은?",
			"options": ["환경 보호의 중요성", "기술 발전의 문제점", "교육의 필요성", "건강한 생활 습관"],
			"correctAnswer": 0,
			"explanation": "글 전체에서 환경을 보호해야 한다는 내용이 반복적으로 나타나므로 주제는 '환경 보호의 중요성'입니다.",
		},
		{
			"type": "multiple_choice",
			"question": "글에서 '관찰'의 의미로 가장 적절한 것은?",
			"options": ["대충 보기", "자세히 살펴보기", "빨리 훑어보기", "멀리서 보기"],
			"correctAnswer": 1,
			"explanation": "'관찰'은 어떤 대상을 자세히 살펴보고 연구하는 행위를 의미합니다.",
		},
		{
			"type": "short_answer",
			"question": "환경을 보호하기 위해 우리가 할 수 있는 일을 두 가지 쓰시오.",
			"expectedLength": "1-2문장",
			"sampleAnswer": "쓰레기 분리수거를 하고, 일회용품 사용을 줄인다.",
			"gradingCriteria": ["환경 보호와 관련된 구체적인 행동 제시", "두 가지 이상의 방법 언급"],
			"explanation": "환경 보호를 위한 실천 방안으로는 재활용, 에너지 절약, 대중교통 이용 등이 있습니다.",
		},
	],
}

GRAMMAR_SAMPLE: Dict[str, Any] = {
	"title": "조사 '은/는'과 '이/가'",
	"description": "주어 뒤에 붙는 조사의 쓰임을 비교합니다.",
	"mainContent": {
		"introduction": "'은/는'은 이야기의 화제를, '이/가'는 새로운 정보의 주어를 나타냅니다.",
		"keyPoints": [
			"받침이 있으면 '은/이', 없으면 '는/가'를 씁니다",
			"처음 소개하는 대상에는 '이/가'를 자주 씁니다",
			"비교하거나 대조할 때는 '은/는'을 씁니다",
		],
		"examples": [
			{"korean": "저는 학생이에요.", "explanation": "자신을 화제로 소개할 때"},
			{"korean": "누가 왔어요? 친구가 왔어요.", "explanation": "새로운 정보를 알려줄 때"},
		],
	},
	"exercises": [
		{
			"type": "multiple-choice",
			"question": "빈칸에 알맞은 말은? '하늘(   ) 파래요.'",
			"options": ["이", "가", "을", "를"],
			"correctAnswer": 0,
			"explanation": "'하늘'은 받침이 있으므로 '이'를 씁니다.",
		}
	],
	"additionalNotes": ["'나'와 '저'에 '가'가 붙으면 '내가', '제가'가 됩니다."],
}

QUIZ_SAMPLE: Dict[str, Any] = {
	"title": "봄 꽃 퀴즈",
	"description": "봄에 피는 꽃에 대한 간단한 퀴즈입니다.",
	"mainContent": {
		"introduction": "지문을 떠올리며 문제를 풀어보세요.",
		"keyPoints": ["개나리는 노란색", "진달래는 분홍색", "벚꽃은 하얀색과 분홍색"],
		"examples": [],
	},
	"exercises": [
		{
			"type": "multiple-choice",
			"question": "봄에 가장 먼저 피는 노란 꽃은?",
			"options": ["개나리", "장미", "국화", "코스모스"],
			"correctAnswer": 0,
			"explanation": "개나리는 이른 봄에 노랗게 핍니다.",
		},
		{
			"type": "true-false",
			"question": "꽃은 꺾어서 가져가도 괜찮다.",
			"options": ["O", "X"],
			"correctAnswer": 1,
			"explanation": "꽃도 살아있는 생명이므로 구경만 해야 합니다.",
		},
	],
	"additionalNotes": [],
}

CANNED_BY_TYPE: Dict[str, Dict[str, Any]] = {
	"vocabulary": VOCABULARY_SAMPLE,
	"vocabulary_extraction": VOCABULARY_EXTRACTION_SAMPLE,
	"questions": QUESTIONS_SAMPLE,
	"answers": ANSWERS_SAMPLE,
	"analysis": ANALYSIS_SAMPLE,
	"reading_problems": READING_PROBLEMS_SAMPLE,
	"grammar": GRAMMAR_SAMPLE,
	"quiz": QUIZ_SAMPLE,
}

COUNTED_LISTS: Dict[str, str] = {
	"vocabulary_extraction": "vocabularyList",
	"reading_problems": "problems",
}

TOKENS_BY_TYPE: Dict[str, int] = {
	"reading": 150,
	"vocabulary": 100,
	"vocabulary_extraction": 100,
	"questions": 120,
	"answers": 90,
}
DEFAULT_MOCK_TOKENS = 100


def pick_topic(prompt_text: str) -> str:
	lowered = (prompt_text or "").lower()
	for topic, keywords in TOPIC_KEYWORDS:
		if any(keyword in lowered for keyword in keywords):
			return topic
	return DEFAULT_TOPIC


def fit_passage(topic: str, target_length: int) -> str:
	"""Sample passage padded or clipped to exactly ``target_length`` characters."""
	sample = READING_SAMPLES.get(topic, READING_SAMPLES[DEFAULT_TOPIC])
	text = sample["base"]
	if target_length >= 600:
		text += sample["additional"]
	if target_length >= 1000:
		text += sample["extra"]
	missing = target_length - len(text)
	if missing > 0:
		padding = sample["padding"]
		text += padding * math.ceil(missing / len(padding))
	return text[:target_length]


def reading_sample(request: GenerationRequest) -> Dict[str, Any]:
	topic = pick_topic(request.prompt_text)
	sample = READING_SAMPLES[topic]
	return {
		"title": sample["title"],
		"description": f"{sample['topic']}에 대한 읽기 지문",
		"mainContent": {
			"introduction": fit_passage(topic, request.desired_length),
			"keyPoints": list(sample["keyPoints"]),
			"examples": copy.deepcopy(sample["examples"]),
		},
		"metadata": {
			"characterCount": request.desired_length,
			"gradeLevel": request.target_audience,
			"topic": sample["topic"],
			"difficulty": request.difficulty,
		},
	}


class MockResponder:
	def respond(self, request: GenerationRequest) -> NormalizedResult:
		provider = canonical_provider(request.provider)
		logger.info("No usable %s credential; answering %s request with mock content", provider, request.content_type)
		if request.content_type == "reading":
			data = reading_sample(request)
		else:
			data = copy.deepcopy(CANNED_BY_TYPE[request.content_type])
			list_key = COUNTED_LISTS.get(request.content_type)
			if list_key and request.item_count:
				data[list_key] = data[list_key][: request.item_count]
		return NormalizedResult(
			success=True,
			provider=provider,
			content=StructuredContent(data),
			tokens_used=TOKENS_BY_TYPE.get(request.content_type, DEFAULT_MOCK_TOKENS),
			mock=True,
		)
