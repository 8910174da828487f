"""
Pattern definitions for job post classification and field extraction.

This module contains the regex patterns used to tell hiring posts apart from
self-promotion on mixed-intent community sources, plus the shared patterns for
remote indicators, job types and salaries.

CATEGORIES:
1. SELF_PROMOTION_PATTERNS: the author is offering their own services
   - "available for hire", "[For Hire]", "my rate", "hire me", "my portfolio"
2. STRONG_HIRING_PATTERNS: the author is seeking candidates
   - "we are hiring", "[Hiring]", "join our team", "send your resume"
3. STRUCTURE_PATTERNS: formatted job post sections
   - "Requirements:", "Responsibilities:", "Qualifications:"
4. SALARY_PATTERNS / WEAK_HIRING_PATTERNS: only positive together
   - "$80k" + "looking for", "salary" + "position"

APPROACH:
- Check self-promotion first
- ANY self-promotion match = not hiring, regardless of other signals
- Otherwise a strong hiring phrase, a formatted block, or salary language next
  to a weak hiring phrase = hiring
- Nothing matched = unclear
"""

import re
from typing import Dict, List, Pattern, Tuple

from ..models import JobType

# ============================================================================
# SELF PROMOTION (Negative, takes precedence)
# ============================================================================

SELF_PROMOTION_PATTERNS: Dict[str, Pattern[str]] = {
    "AVAILABLE_FOR_HIRE": re.compile(r"\bavailable\s+for\s+(hire|work|freelance|new\s+projects?|projects?)\b", re.IGNORECASE),
    "FOR_HIRE_TAG": re.compile(r"\[\s*for\s+hire\s*\]", re.IGNORECASE),
    "MY_RATE": re.compile(r"\bmy\s+(hourly\s+|day\s+|daily\s+)?rates?\b", re.IGNORECASE),
    "HIRE_ME": re.compile(r"\bhire\s+me\b", re.IGNORECASE),
    "MY_PORTFOLIO": re.compile(r"\b(check\s+out\s+|see\s+)?my\s+portfolio\b", re.IGNORECASE),
    "OFFERING_SERVICES": re.compile(r"\b(offering|offer)\s+(my\s+|our\s+)?(freelance\s+)?services\b", re.IGNORECASE),
    "MY_SERVICES": re.compile(r"\bmy\s+services\b", re.IGNORECASE),
    "OPEN_TO_WORK": re.compile(r"\bopen\s+to\s+(work|new\s+opportunities|new\s+roles)\b", re.IGNORECASE),
    "LOOKING_FOR_WORK": re.compile(
        r"\bi\s*(am|'m)\s+(currently\s+)?(looking|searching|seeking)\s+for\s+(a\s+|new\s+)?"
        r"(job|work|gigs?|clients?|opportunit(y|ies)|projects?|role)\b",
        re.IGNORECASE,
    ),
    "SEEKING_WORK": re.compile(r"\bseeking\s+(work|employment|clients|freelance\s+work)\b", re.IGNORECASE),
}

# ============================================================================
# HIRING SIGNALS (Positive)
# ============================================================================

_ROLE_NOUNS = r"(developers?|engineers?|designers?|programmers?|managers?|analysts?|scientists?|architects?|writers?|marketers?|specialists?|consultants?|interns?)"

STRONG_HIRING_PATTERNS: Dict[str, Pattern[str]] = {
    "WE_ARE_HIRING": re.compile(r"\b(we\s*(are|'re)|we're|i\s*(am|'m)|now|currently|is)\s+hiring\b", re.IGNORECASE),
    "HIRING_TAG": re.compile(r"\[\s*hiring\s*\]", re.IGNORECASE),
    "JOIN_OUR_TEAM": re.compile(r"\bjoin\s+(our|the)\s+(growing\s+)?team\b", re.IGNORECASE),
    "SEEKING_CANDIDATES": re.compile(
        r"\b(seeking|looking\s+for|searching\s+for)\s+(an?\s+)?(experienced\s+|talented\s+|skilled\s+|senior\s+|junior\s+)?"
        r"(candidates?|applicants?|[\w+#.-]+\s+" + _ROLE_NOUNS + r"|" + _ROLE_NOUNS + r")\b",
        re.IGNORECASE,
    ),
    "APPLY_NOW": re.compile(r"\b(apply\s+(now|here|today|at|via|through)|to\s+apply|how\s+to\s+apply)\b", re.IGNORECASE),
    "SEND_RESUME": re.compile(r"\bsend\s+(us\s+|me\s+)?(your\s+)?(resume|cv|portfolio|application)\b", re.IGNORECASE),
    "OPEN_POSITION": re.compile(r"\b(open\s+(positions?|roles?)|job\s+openings?|vacanc(y|ies))\b", re.IGNORECASE),
}

STRUCTURE_PATTERNS: Dict[str, Pattern[str]] = {
    "REQUIREMENTS_BLOCK": re.compile(r"(^|\n)\s*[*#-]*\s*(requirements|qualifications|must\s+haves?)\s*:", re.IGNORECASE),
    "RESPONSIBILITIES_BLOCK": re.compile(
        r"(^|\n)\s*[*#-]*\s*(responsibilities|what\s+you('|’)?ll\s+do|duties)\s*:", re.IGNORECASE
    ),
}

SALARY_PATTERNS: Dict[str, Pattern[str]] = {
    "SALARY_AMOUNT": re.compile(r"[$€£]\s?\d[\d,]*(\.\d+)?\s*k?\b", re.IGNORECASE),
    "SALARY_WORDS": re.compile(
        r"\b(salary|compensation|per\s+hour|hourly|per\s+annum|annually|/\s?(hr|hour|year|yr)|equity|benefits)\b",
        re.IGNORECASE,
    ),
}

WEAK_HIRING_PATTERNS: Dict[str, Pattern[str]] = {
    "LOOKING_FOR": re.compile(r"\blooking\s+for\b", re.IGNORECASE),
    "NEED": re.compile(r"\bneed(s|ed)?\s+(an?\s+)?(help|someone|\w+\s+" + _ROLE_NOUNS + r"|" + _ROLE_NOUNS + r")\b", re.IGNORECASE),
    "POSITION_WORDS": re.compile(r"\b(position|role|opening|opportunity|hiring)\b", re.IGNORECASE),
}

# ============================================================================
# SHARED EXTRACTION PATTERNS
# ============================================================================

REMOTE_INDICATOR = re.compile(r"\b(remote|work\s+from\s+home|wfh|distributed|anywhere)\b", re.IGNORECASE)

# Checked in order; first match wins, full-time is the fallback
JOB_TYPE_PATTERNS: List[Tuple[JobType, Pattern[str]]] = [
    (JobType.INTERNSHIP, re.compile(r"\b(intern|internship|co-op)\b", re.IGNORECASE)),
    (JobType.PART_TIME, re.compile(r"\bpart[\s-]?time\b", re.IGNORECASE)),
    (JobType.FREELANCE, re.compile(r"\b(freelance|freelancer|gig)\b", re.IGNORECASE)),
    (JobType.CONTRACT, re.compile(r"\b(contract|contractor|temporary|temp)\b", re.IGNORECASE)),
    (JobType.FULL_TIME, re.compile(r"\bfull[\s-]?time\b", re.IGNORECASE)),
]

_SALARY_UNIT = r"(?:\s*(?:k|K|per\s+year|/year|/yr|annually|per\s+hour|/hour|/hr|an\s+hour))?"

SALARY_EXTRACTION_PATTERNS: List[Pattern[str]] = [
    re.compile(r"\$\s?[\d,]+(?:\.\d{2})?\s*[kK]?\s*(?:-|–|to)\s*\$?\s?[\d,]+(?:\.\d{2})?" + _SALARY_UNIT, re.IGNORECASE),
    re.compile(r"[\d,]+\s*(?:-|–|to)\s*[\d,]+\s*(?:USD|EUR|GBP|CAD)\b" + _SALARY_UNIT, re.IGNORECASE),
    re.compile(r"\$\s?[\d,]+(?:\.\d{2})?\s*(?:k|K|per\s+year|/year|/yr|annually|per\s+hour|/hour|/hr|an\s+hour)", re.IGNORECASE),
]

# Combined patterns for easy access
ALL_CLASSIFIER_PATTERNS: Dict[str, Dict[str, Pattern[str]]] = {
    "self_promotion": SELF_PROMOTION_PATTERNS,
    "strong_hiring": STRONG_HIRING_PATTERNS,
    "structure": STRUCTURE_PATTERNS,
    "salary": SALARY_PATTERNS,
    "weak_hiring": WEAK_HIRING_PATTERNS,
}


def get_pattern_names_by_category() -> Dict[str, List[str]]:
    """Get pattern names organized by category for debugging/logging."""
    return {category: list(patterns.keys()) for category, patterns in ALL_CLASSIFIER_PATTERNS.items()}
