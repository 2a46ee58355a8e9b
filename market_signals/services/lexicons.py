"""
Keyword lexicons and tier playbooks for review classification.

Review sources are predominantly Korean with English mixed in, so every
lexicon carries both. Matching is substring-based (see text_classifier).

- PERSONA_LEXICON: player-tier indicators; keywords weigh 1, regex patterns
  (playtime mentions, difficulty and replay phrases) weigh 2
- FUN_POSITIVE_LEXICON / FUN_NEGATIVE_LEXICON: praise and complaint
  vocabulary per fun category
- TIER_STRATEGIES: marketing playbook per player tier
"""

from typing import Dict, List, Sequence

from market_signals.models.enums import FunCategory, PlayerTier
from market_signals.models.schemas import CommunicationStrategy
from market_signals.services.text_classifier import KeywordRule, Lexicon

KEYWORD_WEIGHT: float = 1.0
PATTERN_WEIGHT: float = 2.0


def _rules(keywords: Sequence[str], patterns: Sequence[str] = ()) -> List[KeywordRule]:
    rules = [KeywordRule(term, KEYWORD_WEIGHT) for term in keywords]
    rules.extend(KeywordRule(term, PATTERN_WEIGHT, pattern=True) for term in patterns)
    return rules


# =============================================================================
# Player persona
# =============================================================================

PERSONA_LEXICON = Lexicon(
    "persona",
    {
        PlayerTier.CORE: _rules(
            [
                # Jargon
                '메타', 'meta', '빌드', 'build', '최적화', 'min-max', '밸런스',
                '패치', 'nerf', 'buff', '티어', 'tier', 'dps', 'dpm',
                '프레임', 'frame', '히트박스', 'hitbox', '무적 프레임', 'i-frame',
                # Comparison and analysis
                '전작 대비', '시리즈 중', '장르 내', '다른 게임과',
                '시스템적으로', '메커닉', 'mechanics', '레벨 디자인',
                # Completionism
                '완벽주의', '올클리어', '100%',
            ],
            [
                r'(\d{3,})\s*시간',
                r'최고\s*난이도',
                r'뉴게임\s*\+',
                r'스피드\s*런',
            ],
        ),
        PlayerTier.DEDICATED: _rules(
            [
                '사랑', '최고', '명작', '인생게임', '갓겜', 'goty', '올해의 게임',
                '강력 추천', '꼭 해보세요', '진짜 좋음', '완전 재밌',
                '커뮤니티', '디스코드', '공략', '가이드', '모드',
                '업데이트', 'dlc', '시즌', '패치 노트',
                '장점은', '단점은', '총평', '요약하자면',
            ],
            [
                r'(\d{2,})\s*시간',
                r'\d+번\s*(째|번째)',
                r'출시\s*(일|날)부터',
            ],
        ),
        PlayerTier.ENGAGED: _rules(
            [
                '재밌', '좋았', '만족', '괜찮', '할만',
                '가성비', '가격 대비', '세일 때', '할인',
                '추천', '친구한테', '같이 하면',
                '나쁘지 않', '무난', '평균적',
            ],
            [
                r'(\d{1,2})\s*시간',
                r'친구\s*(랑|와)',
            ],
        ),
        PlayerTier.CASUAL: _rules(
            [
                '가볍게', '간단히', '쉽게', '편하게', '심플',
                '힐링', '릴렉스', '휴식', '스트레스 해소',
                '어렵지 않', '누구나', '처음이라도', '입문',
                '잠깐', '짧게', '틈틈이',
            ],
            [
                r'(\d)\s*시간',
                r'시간\s*(날|낼)\s*때',
            ],
        ),
        PlayerTier.BROAD: _rules(
            [
                '트렌드', '인기', '핫한', '요즘',
                '번들', '무료', '공짜', '에픽', 'humble',
                '그냥', '한번', '해봤는데', '관심',
                '안 해봤', '못 해봤', '나중에',
            ],
            [
                r'세일\s*(때|중)',
                r'무료\s*로',
                r'받아서',
            ],
        ),
    },
)


# =============================================================================
# Core fun
# =============================================================================

FUN_POSITIVE_LEXICON = Lexicon(
    "fun_positive",
    {
        FunCategory.GAMEPLAY: _rules([
            '조작감', '조작', '컨트롤', '손맛', '타격감', '반응',
            'controls', 'responsive', 'gameplay',
            '전투', '액션', '콤보', '스킬', '무기', '보스전',
            'combat', 'action', 'fight', 'battle',
            '퍼즐', '문제 해결', '두뇌', '기믹',
            'puzzle', 'mechanics',
            '중독', '재미있', '재밌', '꿀잼', '빠져들',
            'fun', 'addictive', 'engaging',
        ]),
        FunCategory.STORY: _rules([
            '스토리', '서사', '이야기', '플롯', '전개', '결말',
            'story', 'narrative', 'plot', 'ending',
            '캐릭터', '인물', '주인공', '악당', '매력적',
            'character', 'protagonist',
            '감동', '울었', '눈물', '여운', '몰입',
            'emotional', 'touching', 'immersive',
            '세계관', '배경', '로어', '설정',
            'worldbuilding', 'lore',
        ]),
        FunCategory.AUDIOVISUAL: _rules([
            '그래픽', '비주얼', '아트', '예쁘', '아름다', '화려',
            'graphics', 'beautiful', 'stunning', 'art',
            '사운드', '음악', 'bgm', 'ost', '효과음', '배경음',
            'sound', 'music', 'soundtrack', 'audio',
            '분위기', '연출', '카메라', '애니메이션',
            'atmosphere', 'cinematic',
        ]),
        FunCategory.SOCIAL: _rules([
            '멀티', '코옵', '같이', '함께', '친구', '협동',
            'multiplayer', 'co-op', 'together', 'friends',
            '경쟁', 'pvp', '대전', '랭킹', '순위',
            'competitive', 'ranking',
            '커뮤니티', '길드', '클랜', '파티',
            'community', 'guild', 'clan',
        ]),
        FunCategory.PROGRESSION: _rules([
            '성장', '레벨업', '스탯', '강해', '강화',
            'progression', 'level up', 'upgrade',
            '수집', '파밍', '아이템', '장비', '얻', '모으',
            'collect', 'loot', 'items',
            '도전', '업적', '클리어', '완료', '정복',
            'achievement', 'challenge', 'complete',
            '보상', '뿌듯', '성취', '해금',
            'reward', 'satisfying', 'unlock',
        ]),
        FunCategory.FREEDOM: _rules([
            '탐험', '탐색', '오픈월드', '넓은', '발견',
            'explore', 'open world', 'discovery',
            '창작', '건설', '커스텀', '꾸미기', '만들',
            'creative', 'build', 'customize', 'create',
            '자유', '선택', '내 방식', '자유도',
            'freedom', 'choice', 'sandbox',
            '비선형', '다양한 엔딩', '루트',
            'non-linear', 'multiple endings',
        ]),
    },
)

FUN_NEGATIVE_LEXICON = Lexicon(
    "fun_negative",
    {
        FunCategory.GAMEPLAY: _rules([
            '조작 불편', '조작감 별로', '노잼', '지루', '반복적',
            'clunky', 'boring', 'repetitive',
        ]),
        FunCategory.STORY: _rules([
            '스토리 없', '스토리 별로', '뻔한', '클리셰',
            'no story', 'weak story', 'predictable',
        ]),
        FunCategory.AUDIOVISUAL: _rules([
            '그래픽 별로', '그래픽 구림', '음악 별로',
            'ugly', 'bad graphics', 'poor audio',
        ]),
        FunCategory.SOCIAL: _rules([
            '솔플 강요', '멀티 없', '혼자서만', '유저 없',
            'no multiplayer', 'dead', 'empty server',
        ]),
        FunCategory.PROGRESSION: _rules([
            '노가다', '그라인딩', '반복 작업', 'p2w',
            'grindy', 'pay to win', 'tedious',
        ]),
        FunCategory.FREEDOM: _rules([
            '자유도 없', '일직선', '강제', '선택지 없',
            'linear', 'no freedom', 'no choice',
        ]),
    },
)


# =============================================================================
# Tier playbooks
# =============================================================================

TIER_STRATEGIES: Dict[PlayerTier, CommunicationStrategy] = {
    PlayerTier.CORE: CommunicationStrategy(
        tier=PlayerTier.CORE,
        channels=["Specialist forums", "Discord", "Reddit", "Streamer collaborations"],
        messaging=[
            "In-depth system explanations",
            "Detailed patch notes",
            "Visible response to community feedback",
            "Support for competitive play and tournaments",
        ],
        contentTypes=["Deep-dive guides", "Meta analysis", "Developer AMAs", "Patch notes"],
        tone="Expert, technical, transparent",
    ),
    PlayerTier.DEDICATED: CommunicationStrategy(
        tier=PlayerTier.DEDICATED,
        channels=["Official social accounts", "YouTube", "Steam community", "Newsletter"],
        messaging=[
            "Share the update roadmap",
            "Announce DLC and season passes",
            "Community events",
            "Support fan art and creators",
        ],
        contentTypes=["Dev diaries", "Teasers and trailers", "Event announcements", "Player stories"],
        tone="Friendly, enthusiastic, grateful",
    ),
    PlayerTier.ENGAGED: CommunicationStrategy(
        tier=PlayerTier.ENGAGED,
        channels=["Mainstream social media", "Games press", "Influencers"],
        messaging=[
            "Value for money",
            "Playing together with friends",
            "Sale announcements",
            "Approachable starter guides",
        ],
        contentTypes=["Gameplay videos", "Review highlights", "Sale notices", "Quick intros"],
        tone="Casual, playful, approachable",
    ),
    PlayerTier.CASUAL: CommunicationStrategy(
        tier=PlayerTier.CASUAL,
        channels=["Mobile social media", "Ads", "Storefront featuring"],
        messaging=[
            "Easy, simple play",
            "A relaxing experience",
            "Short play sessions",
            "Stress relief",
        ],
        contentTypes=["Short clips", "Highlights", "GIFs", "Quick previews"],
        tone="Light, comfortable, inviting",
    ),
    PlayerTier.BROAD: CommunicationStrategy(
        tier=PlayerTier.BROAD,
        channels=["Major sale events", "Bundle sites", "Free giveaways"],
        messaging=[
            "Limited-time discounts",
            "Free trials",
            "Ride current trends",
            "Easy to start",
        ],
        contentTypes=["Sale banners", "Bundle announcements", "Free weekends", "Demos"],
        tone="Direct, discount-led, urgency-driven",
    ),
}
