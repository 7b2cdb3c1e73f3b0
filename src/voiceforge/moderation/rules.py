"""Moderation rule catalogue and topic presets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..schemas.moderation import RiskTier, RuleCategory, Strictness

STRICTNESS_LEVELS: tuple[Strictness, ...] = ("off", "standard", "strict")


@dataclass(frozen=True)
class RuleDefinition:
    name: str
    category: RuleCategory
    prompts: dict[str, str] = field(default_factory=dict)
    risk_tier: Optional[RiskTier] = None
    risk_description: Optional[str] = None

    def prompt_for(self, level: str) -> Optional[str]:
        if level == "off":
            return None
        return self.prompts.get(level)


RULE_DEFINITIONS: dict[str, RuleDefinition] = {
    "sexual_content": RuleDefinition(
        name="Sexual Content",
        category="safety",
        prompts={
            "standard": (
                "explicitly graphic sexual descriptions, pornographic content, or sexual "
                "harassment aimed at someone. Suggestive or mild content (dance references, "
                "innuendo, light flirting) should PASS at this level; only block what is "
                "genuinely graphic, pornographic or harassing"
            ),
            "strict": (
                "ANY sexual content: explicit material, innuendo, suggestive themes, flirting, "
                'sexual jokes, double entendres, mild sexual references, "that\'s what she said" jokes'
            ),
        },
    ),
    "hate_speech": RuleDefinition(
        name="Hate Speech",
        category="safety",
        prompts={
            "standard": (
                "explicit, severe hate speech: racial or homophobic slurs, calls for violence "
                "against identity groups, targeted harassment using identity-based insults, "
                "dehumanising comparisons. Do NOT block stereotypes, microaggressions or subtle "
                'bias (that needs STRICT). Do NOT block gaming talk such as "kill the boss", '
                '"get wrecked" or "obliterated"; banter that does not target a protected group '
                "is not hate speech"
            ),
            "strict": (
                "ALL standard hate speech PLUS subtle discrimination: dog-whistles, coded "
                "bigotry, microaggressions, harmful stereotypes, backhanded compliments aimed at "
                'identity ("smart for a girl") and exclusionary language'
            ),
        },
    ),
    "violence": RuleDefinition(
        name="Violence & Threats",
        category="safety",
        prompts={
            "standard": (
                "credible real-world threats against a SPECIFIC person, detailed instructions for "
                "real violence, encouragement of self-harm or suicide, terroristic threats. Do NOT "
                'block in-game violence ("I\'ll kill you", raid wipes), meme phrases ("kill it '
                'with fire") or vague violent expressions. A threat must identify a REAL person '
                "to be blocked"
            ),
            "strict": (
                'ANY violent or threatening content: direct or implied threats ("watch your '
                'back"), aggressive language ("I\'ll destroy you"), violent imagery, fight '
                "descriptions, weapons mentioned in a threatening context"
            ),
        },
    ),
    "doxxing": RuleDefinition(
        name="Personal Information",
        category="safety",
        prompts={
            "standard": (
                "full real-world addresses, phone numbers, social security or credit card "
                "numbers, private data that could identify someone, doxxing attempts"
            ),
            "strict": (
                "ANY potentially identifying information: full or partial addresses, phone "
                "numbers, workplace or school names, neighbourhood details, licence plates, "
                "relatives' names combined with locations"
            ),
        },
    ),
    "misinformation": RuleDefinition(
        name="Misinformation",
        category="safety",
        prompts={
            "standard": (
                'dangerous medical advice that could cause harm ("drink bleach to cure X"), '
                "dangerous legal advice, safety misinformation that could lead to injury"
            ),
            "strict": (
                "ANY potentially harmful misinformation: dangerous medical, legal or safety "
                "advice, conspiracy theories, unverified claims presented as fact, misleading "
                "statistics"
            ),
        },
    ),
    "song_lyrics": RuleDefinition(
        name="Song Lyrics",
        category="copyright",
        risk_tier="high",
        risk_description="Music rights holders enforce aggressively. High DMCA risk.",
        prompts={
            "standard": (
                "text containing 2 or more consecutive lines of song lyrics.\n"
                "  - Lyrical structure (rhythm, rhyme, verses) across 2+ lines is likely lyrics.\n"
                "  - Lyrics that are not public domain should be blocked; when unsure, block.\n"
                "  - Always allow public domain songs: nursery rhymes, traditional and folk songs, "
                "holiday classics, national anthems.\n"
                "  - Also allow song titles, artist names, parodies and single isolated lines."
            ),
            "strict": (
                "ANY recognisable lyrics from copyrighted songs, even single iconic lines "
                '("Never gonna give you up", "Hello from the other side").\n'
                "  - Do not block public domain songs: nursery rhymes, folk songs, "
                '"Happy Birthday", carols, national anthems.\n'
                "  - Still allow song titles, artist names and discussion without quoting."
            ),
        },
    ),
    "media_quotes": RuleDefinition(
        name="Movie/TV/Book Quotes",
        category="copyright",
        risk_tier="medium",
        risk_description="Less aggressive enforcement. Fair use often covers commentary.",
        prompts={
            "standard": (
                "substantial verbatim passages from movies, TV shows or books: full monologues, "
                "several consecutive lines of dialogue.\n"
                '  - Do not block short one-liners ("I\'ll be back"), character names, plot '
                "discussion or common phrases that started in media."
            ),
            "strict": (
                "ANY recognisable quote from copyrighted media, including famous one-liners, "
                'iconic phrases ("May the Force be with you") and book openings ("Call me '
                'Ishmael").\n'
                "  - Still allow character names, plot discussion and paraphrasing."
            ),
        },
    ),
    "profanity": RuleDefinition(
        name="Profanity",
        category="profanity",
        prompts={
            "standard": (
                "strong profanity: the f-word and variants, the s-word, the c-word, hard slurs "
                "and other severe swear words"
            ),
            "strict": (
                "ANY profanity: strong swear words, mild profanity (damn, hell, crap, ass, "
                "bastard), religious profanity and crude language"
            ),
        },
    ),
}

SAFETY_RULE_KEYS: tuple[str, ...] = (
    "sexual_content",
    "hate_speech",
    "violence",
    "doxxing",
    "misinformation",
)
COPYRIGHT_RULE_KEYS: tuple[str, ...] = ("song_lyrics", "media_quotes")

_RISK_ORDER = {"high": 0, "medium": 1, "low": 2}


def risk_rank(definition: RuleDefinition) -> int:
    return _RISK_ORDER.get(definition.risk_tier or "low", len(_RISK_ORDER))


@dataclass(frozen=True)
class TopicPreset:
    name: str
    description: str


TOPIC_PRESETS: dict[str, TopicPreset] = {
    "politics": TopicPreset(
        "Politics",
        "genuinely divisive political discussion: partisan arguments, debates, campaign "
        'promotion, political trolling. NOT passing mentions of countries or hyperbole like '
        '"that should be illegal"',
    ),
    "religion": TopicPreset(
        "Religion",
        "divisive religious debate, proselytising, theological arguments, religious trolling. "
        'NOT exclamations like "Oh my God!", "bless you" or holiday references',
    ),
    "streamer_drama": TopicPreset(
        "Streamer/Creator Drama",
        "controversies involving other streamers or creators, community drama, creator gossip",
    ),
    "spoilers": TopicPreset(
        "Spoilers & Backseating",
        "plot spoilers, puzzle solutions, unsolicited gameplay advice, telling the streamer what to do",
    ),
    "trauma_dumping": TopicPreset(
        "Trauma Dumping",
        "heavy personal trauma, deeply emotional confessions, therapy-level issues shared publicly",
    ),
    "crypto_finance": TopicPreset(
        "Crypto & Financial Schemes",
        "cryptocurrency, NFTs, trading advice, get-rich-quick schemes, investment tips",
    ),
    "console_wars": TopicPreset(
        "Console/Platform Wars",
        "console versus console debates, platform tribalism, superiority arguments",
    ),
    "body_image": TopicPreset(
        "Body Image & Appearance",
        "comments on weight or looks, body shaming, unsolicited appearance opinions",
    ),
    "relationship_status": TopicPreset(
        "Relationship Status",
        "questions about dating, marriage, partners, parasocial relationship inquiries",
    ),
    "age_location": TopicPreset(
        "Age & Location",
        "real attempts to extract identifying information. NOT casual \"where are you from?\" "
        "or timezone questions",
    ),
    "competitor_mentions": TopicPreset(
        "Competitor Mentions",
        "promoting other streamers, mentioning rival channels, advertising competing content",
    ),
    "real_world_tragedies": TopicPreset(
        "Real-World Tragedies",
        "current disasters, mass shootings, terrorist attacks, ongoing tragedies in the news",
    ),
}


__all__ = [
    "COPYRIGHT_RULE_KEYS",
    "RULE_DEFINITIONS",
    "RuleDefinition",
    "SAFETY_RULE_KEYS",
    "STRICTNESS_LEVELS",
    "TOPIC_PRESETS",
    "TopicPreset",
    "risk_rank",
]
