"""
Constants used across the parsers.
Rule tables are plain data; they are validated when a parser is built.
"""
from typing import Dict, List, Set, Tuple

# =============================================================================
# Tag taxonomy (closed enum)
# =============================================================================
TAG_TYPES: List[str] = [
    "date",
    "time",
    "priority",
    "location",
    "person",
    "label",
    "project",
]

PRIORITY_LEVELS: List[str] = ["low", "medium", "high"]

SEVERITY_RANK: Dict[str, int] = {"low": 1, "medium": 2, "high": 3}

CONFLICT_SCOPES: List[str] = ["global", "type"]

# =============================================================================
# Priority rule table
# =============================================================================
PRIORITY_RULES: List[dict] = [
    # Explicit p1/p2/p3 (Todoist style)
    {"pattern": r"\bp1\b", "level": "high", "confidence": 0.95},
    {"pattern": r"\bp2\b", "level": "medium", "confidence": 0.95},
    {"pattern": r"\bp3\b", "level": "low", "confidence": 0.95},

    # High
    {
        "pattern": r"\b(?:urgent|critical|asap|emergency|high priority|important)\b",
        "level": "high",
        "confidence": 0.85,
    },
    {"pattern": r"\bhigh\b", "level": "high", "confidence": 0.75},

    # Medium
    {
        "pattern": r"\b(?:medium priority|normal priority|moderate)\b",
        "level": "medium",
        "confidence": 0.80,
    },
    {"pattern": r"\bmedium\b", "level": "medium", "confidence": 0.70},

    # Low
    {
        "pattern": r"\b(?:low priority|when possible|someday|maybe|optional)\b",
        "level": "low",
        "confidence": 0.80,
    },
    {"pattern": r"\blow\b", "level": "low", "confidence": 0.65},

    # Phrase-level synonyms
    {
        "pattern": r"\b(?:top priority|highest priority|must do)\b",
        "level": "high",
        "confidence": 0.90,
    },
    {
        "pattern": r"\b(?:least priority|lowest priority|nice to have)\b",
        "level": "low",
        "confidence": 0.85,
    },

    # Urgency indicators
    {
        "pattern": r"\b(?:due soon|overdue|time sensitive)\b",
        "level": "high",
        "confidence": 0.80,
    },
    {
        "pattern": r"\b(?:no rush|no hurry|later|eventually)\b",
        "level": "low",
        "confidence": 0.75,
    },
]

PRIORITY_DISPLAY: Dict[str, str] = {
    "high": "High Priority",
    "medium": "Medium Priority",
    "low": "Low Priority",
}

PRIORITY_ICONS: Dict[str, str] = {
    "high": "AlertCircle",
    "medium": "Flag",
    "low": "Minus",
}

PRIORITY_COLORS: Dict[str, str] = {
    "high": "#ef4444",
    "medium": "#f59e0b",
    "low": "#6b7280",
}

# =============================================================================
# People
# =============================================================================
KINSHIP_TERMS: List[str] = [
    "mom", "mum", "dad", "father", "mother", "brother", "sister", "son",
    "daughter", "grandma", "grandmother", "grandpa", "grandfather", "aunt",
    "uncle", "cousin", "partner", "spouse",
]

NAME_TRIGGERS: List[str] = [
    "zoom with", "with", "call", "text", "email", "meet", "message", "ping", "dm",
]

# Capitalized words that never start a name on their own
NAME_STOPLIST: Set[str] = {"i", "the", "a", "an", "and", "but", "or"}

# =============================================================================
# Locations
# =============================================================================
LOCATION_PREPOSITIONS: List[str] = ["at", "in", "near", "by", "to"]

VENUE_KEYWORDS: List[str] = [
    "downtown", "uptown", "mall", "center", "office", "store", "restaurant",
    "bank", "hospital", "school", "gym", "park",
]

STREET_SUFFIXES: List[str] = [
    "St", "Street", "Ave", "Avenue", "Rd", "Road", "Blvd", "Boulevard",
    "Dr", "Drive", "Way", "Pl", "Place",
]

ADDRESS_SUFFIXES: List[str] = STREET_SUFFIXES + [
    "Ln", "Lane", "Ct", "Court", "Cir", "Circle",
]

# =============================================================================
# Category labels (declaration order breaks exclusive-group ties)
# =============================================================================
CATEGORY_RULES: List[dict] = [
    {
        "name": "work",
        "keywords": [
            "work", "office", "meeting", "project", "presentation", "deadline",
            "client", "boss", "manager", "colleague", "coworker", "email",
            "report", "proposal", "brief", "sprint", "scrum", "standup", "jira",
            "pr", "pull request", "review", "deploy", "zoom", "slack",
        ],
    },
    {
        "name": "personal",
        "keywords": [
            "personal", "family", "home", "house", "chores", "cleaning",
            "cooking", "grocery", "shopping", "doctor", "dentist",
            "appointment", "kids", "children", "errand", "laundry", "garden",
            "pet", "pets",
        ],
    },
    {
        "name": "health",
        "keywords": [
            "doctor", "dentist", "hospital", "clinic", "pharmacy", "medicine",
            "workout", "gym", "exercise", "yoga", "therapy", "checkup",
            "physio", "run", "jog", "cycle", "swim",
        ],
    },
    {
        "name": "shopping",
        "keywords": [
            "buy", "purchase", "shop", "store", "mall", "grocery", "groceries",
            "food", "clothes", "gift", "amazon", "online", "order", "cart",
            "checkout", "wishlist",
        ],
    },
    {
        "name": "finance",
        "keywords": [
            "bank", "atm", "money", "payment", "bill", "invoice", "taxes",
            "budget", "insurance", "loan", "mortgage", "salary", "payroll",
            "expense", "refund",
        ],
    },
    {
        "name": "social",
        "keywords": [
            "friend", "friends", "dinner", "lunch", "coffee", "party",
            "birthday", "wedding", "event", "meet", "hangout", "brunch",
            "drink", "drinks", "movie", "concert", "game night",
        ],
    },
    {
        "name": "travel",
        "keywords": [
            "flight", "plane", "airport", "hotel", "vacation", "trip", "travel",
            "book", "ticket", "passport", "visa", "train", "bus", "uber", "lyft",
            "drive", "commute", "itinerary", "boarding pass",
        ],
    },
    {
        "name": "education",
        "keywords": [
            "school", "university", "college", "class", "study", "homework",
            "exam", "test", "assignment", "library", "lecture", "seminar",
            "course", "tutor", "thesis",
        ],
    },
]

EXCLUSIVE_CATEGORY_GROUPS: List[Tuple[str, ...]] = [
    ("work", "education"),
    ("shopping", "personal"),
]

CATEGORY_ICONS: Dict[str, str] = {
    "work": "Briefcase",
    "personal": "Home",
    "health": "Heart",
    "shopping": "ShoppingCart",
    "finance": "DollarSign",
    "social": "Users",
    "travel": "Plane",
    "education": "GraduationCap",
}

CATEGORY_COLORS: Dict[str, str] = {
    "work": "#3b82f6",
    "personal": "#10b981",
    "health": "#ef4444",
    "shopping": "#f59e0b",
    "finance": "#059669",
    "social": "#8b5cf6",
    "travel": "#06b6d4",
    "education": "#dc2626",
}

DEFAULT_LABEL_ICON: str = "Tag"
DEFAULT_LABEL_COLOR: str = "#6b7280"

# =============================================================================
# Presentation hints for entity tags
# =============================================================================
PERSON_ICON: str = "User"
PERSON_COLOR: str = "#8b5cf6"
LOCATION_ICON: str = "MapPin"
LOCATION_COLOR: str = "#10b981"
PROJECT_ICON: str = "Building"
PROJECT_COLOR: str = "#f59e0b"
DATE_ICON: str = "Calendar"
TIME_ICON: str = "Clock"
DATE_COLOR: str = "#3b82f6"

# =============================================================================
# spaCy entity labels routed to tag types
# =============================================================================
NER_PERSON_LABELS: Set[str] = {"PERSON"}
NER_PLACE_LABELS: Set[str] = {"GPE", "LOC", "FAC"}
NER_ORG_LABELS: Set[str] = {"ORG"}

# =============================================================================
# Base confidences
# =============================================================================
PERSON_CONFIDENCE: float = 0.8
NER_PLACE_CONFIDENCE: float = 0.8
PATTERN_LOCATION_CONFIDENCE: float = 0.7
ADDRESS_CONFIDENCE: float = 0.85
ORGANIZATION_CONFIDENCE: float = 0.7
ORDINAL_WEEKDAY_CONFIDENCE: float = 0.85

# =============================================================================
# Fallback filters
# =============================================================================
# Tokens after a trigger verb that are never names ("meet at ...", "call me")
CONTEXT_NAME_STOPWORDS: Set[str] = {
    "a", "an", "the", "at", "in", "on", "to", "by", "for", "from", "with",
    "about", "me", "him", "her", "them", "us", "you", "my", "your", "his",
    "their", "our", "back", "up", "out", "and", "or", "it", "this", "that",
    "friend", "friends", "team", "everyone", "someone",
}

# Capitalized words that end a multi-word name after a trigger verb
NAME_TAIL_STOPWORDS: Set[str] = {
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday",
    "sunday", "mon", "tue", "tues", "wed", "thu", "thur", "thurs", "fri",
    "sat", "sun", "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december", "jan",
    "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept", "oct", "nov",
    "dec", "today", "tonight", "tomorrow", "tmrw", "tmr", "yesterday", "eod",
    "noon", "midnight", "asap", "urgent", "next", "this", "last", "at", "in",
    "on", "by", "about", "re",
}

# Words that end a lowercase "at/near ..." location phrase
LOCATION_PHRASE_STOPWORDS: Set[str] = {
    "and", "or", "but", "for", "with", "to", "about", "before", "after",
    "then", "at", "in", "on", "by", "from", "if", "when", "while", "so",
    "me", "him", "her", "them", "us", "you", "it", "least", "most", "all",
    "noon", "midday", "midnight", "night", "tonight", "today", "tomorrow",
    "eod", "once", "some", "point",
}

CAPITALIZED_NAME_CONFIDENCE: float = 0.6
FALLBACK_LOCATION_CONFIDENCE: float = 0.65
FALLBACK_LOCATION_MAX_WORDS: int = 3
