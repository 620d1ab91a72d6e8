"""
Demo occupation matcher
Keyword containment rules map a job description onto one NCO occupation.
This is a placeholder for a semantic matcher; only the response shape
(ranked, scored, justified) is meant to last.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
import random

MAX_RESULTS = 5
CONFIDENCE_JITTER = 0.025
MIN_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.99

OCCUPATIONS = [
    {
        "nco_code": "75320101",
        "title": "Sewing Machine Operator (Garment)",
        "hierarchy": ["Major Group 7", "Sub-Major Group 75", "Minor Group 753", "Unit Group 7532", "Occupation 75320101"],
        "description": "Sewing machine operators operate industrial sewing machines to join, reinforce or decorate garment parts in the manufacture of garments and related articles.",
        "tasks": [
            "Operating single or multi-needle industrial sewing machines",
            "Joining garment parts by sewing seams",
            "Attaching buttons, hooks, zippers and other accessories",
            "Inspecting finished garments for defects",
            "Maintaining sewing machines and replacing needles",
        ],
        "related_occupations": [
            {"nco_code": "75320102", "title": "Overlock Machine Operator"},
            {"nco_code": "75320103", "title": "Button Hole Machine Operator"},
            {"nco_code": "74320101", "title": "Tailor (General)"},
        ],
    },
    {
        "nco_code": "25120101",
        "title": "Software Developer",
        "hierarchy": ["Major Group 2", "Sub-Major Group 25", "Minor Group 251", "Unit Group 2512", "Occupation 25120101"],
        "description": "Software developers research, design, and develop computer software systems, in conjunction with hardware product development, for general use.",
        "tasks": [
            "Researching, analyzing and evaluating requirements for software applications",
            "Designing, developing and integrating computer code",
            "Testing, debugging and refining computer code",
            "Writing and maintaining program documentation",
            "Evaluating and implementing new technologies",
        ],
        "related_occupations": [
            {"nco_code": "25120102", "title": "Web Developer"},
            {"nco_code": "25120103", "title": "Mobile Application Developer"},
            {"nco_code": "25130101", "title": "Database Designer and Administrator"},
        ],
    },
    {
        "nco_code": "51210101",
        "title": "Cook (General)",
        "hierarchy": ["Major Group 5", "Sub-Major Group 51", "Minor Group 512", "Unit Group 5121", "Occupation 51210101"],
        "description": "Cooks prepare and cook food in hotels, restaurants, hospitals and other establishments.",
        "tasks": [
            "Planning menus and estimating food requirements",
            "Preparing and cooking food",
            "Regulating temperatures of ovens and other cooking equipment",
            "Examining food to ensure quality",
            "Supervising and training kitchen staff",
        ],
        "related_occupations": [
            {"nco_code": "51210102", "title": "Chef"},
            {"nco_code": "51210103", "title": "Pastry Cook"},
            {"nco_code": "94120101", "title": "Kitchen Helper"},
        ],
    },
    {
        "nco_code": "23110101",
        "title": "University and Higher Education Teacher",
        "hierarchy": ["Major Group 2", "Sub-Major Group 23", "Minor Group 231", "Unit Group 2311", "Occupation 23110101"],
        "description": "University and higher education teachers teach academic and vocational subjects at universities, colleges and other higher education institutions.",
        "tasks": [
            "Preparing and delivering lectures and seminars",
            "Conducting tutorials and laboratory sessions",
            "Conducting research and publishing findings",
            "Supervising student research projects",
            "Assessing student work and examination papers",
        ],
        "related_occupations": [
            {"nco_code": "23110102", "title": "College Lecturer"},
            {"nco_code": "23110103", "title": "Research Scholar"},
            {"nco_code": "23210101", "title": "Vocational Education Teacher"},
        ],
    },
    {
        "nco_code": "83210101",
        "title": "Motor Vehicle Driver",
        "hierarchy": ["Major Group 8", "Sub-Major Group 83", "Minor Group 832", "Unit Group 8321", "Occupation 83210101"],
        "description": "Motor vehicle drivers drive and tend motor vehicles to transport passengers, mail and goods.",
        "tasks": [
            "Driving cars, vans, trucks and other motor vehicles",
            "Checking vehicle condition and cleanliness",
            "Maintaining vehicle log books and records",
            "Loading and unloading goods",
            "Collecting fares or delivery payments",
        ],
        "related_occupations": [
            {"nco_code": "83210102", "title": "Taxi Driver"},
            {"nco_code": "83210103", "title": "Truck Driver"},
            {"nco_code": "83220101", "title": "Bus Driver"},
        ],
    },
]

@dataclass(frozen=True)
class KeywordRule:
    keywords: Tuple[str, ...]
    nco_code: str
    base_confidence: float
    reason: str

    def matches(self, query: str) -> bool:
        return any(keyword in query for keyword in self.keywords)

# Evaluated in order; the first matching rule wins
KEYWORD_RULES = [
    KeywordRule(
        ("sewing", "garment", "tailor"), "75320101", 0.92,
        "Strong match: Query mentions sewing and garment work, which directly matches this occupation"
    ),
    KeywordRule(
        ("software", "developer", "programmer"), "25120101", 0.95,
        "Exact match: Query directly mentions software development role"
    ),
    KeywordRule(
        ("cook", "chef", "kitchen"), "51210101", 0.88,
        "Strong match: Query indicates cooking and food preparation activities"
    ),
    KeywordRule(
        ("teacher", "professor", "lecturer"), "23110101", 0.85,
        "Good match: Query mentions teaching at higher education level"
    ),
    KeywordRule(
        ("driver", "driving"), "83210101", 0.87,
        "Strong match: Query indicates vehicle driving occupation"
    ),
]

def get_occupation(nco_code: str) -> Optional[dict]:
    for occupation in OCCUPATIONS:
        if occupation["nco_code"] == nco_code:
            return occupation
    return None

def list_occupations() -> List[dict]:
    return list(OCCUPATIONS)

class OccupationMatcher:
    """Maps free text onto ranked occupation candidates"""

    def __init__(self, rules: List[KeywordRule] = None, jitter: Callable[[], float] = None):
        self.rules = rules if rules is not None else KEYWORD_RULES
        self._jitter = jitter or (lambda: random.uniform(-CONFIDENCE_JITTER, CONFIDENCE_JITTER))

    def _score(self, base: float) -> float:
        return min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, base + self._jitter()))

    def search(self, query: str) -> List[dict]:
        """Up to five matches, highest confidence first"""
        lowered = query.lower()
        results = []

        rule = next((r for r in self.rules if r.matches(lowered)), None)
        if rule is not None:
            occupation = get_occupation(rule.nco_code)
            if occupation is not None:
                results.append({
                    "nco_code": occupation["nco_code"],
                    "title": occupation["title"],
                    "hierarchy": occupation["hierarchy"],
                    "description": occupation["description"],
                    "confidence": self._score(rule.base_confidence),
                    "reason": rule.reason,
                })

        results.sort(key=lambda r: r["confidence"], reverse=True)
        return results[:MAX_RESULTS]
