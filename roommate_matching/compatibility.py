from dataclasses import dataclass, asdict
from typing import Callable, Dict, Iterable, List, Optional
import logging

from django.conf import settings
from django.utils.module_loading import import_string

from profiles.models import ProfileSnapshot, parse_interests

logger = logging.getLogger(__name__)

GenderRule = Callable[[str, str], int]

DEFAULT_WEIGHTS = {
    'age': 0.20,
    'gender': 0.15,
    'university': 0.25,
    'lifestyle': 0.25,
    'interests': 0.15,
}

# (minimum overall score, label), checked top-down
COMPATIBILITY_LEVELS = (
    (85.0, 'Excellent Match'),
    (70.0, 'Very Good Match'),
    (55.0, 'Good Match'),
    (40.0, 'Moderate Match'),
)
LOWEST_LEVEL = 'Low Compatibility'

AGE_GAP_SCORES = {0: 100, 1: 95, 2: 85, 3: 75, 4: 65, 5: 50}

LIFESTYLE_AFFINITIES = {
    'quiet': {'studious', 'calm', 'peaceful'},
    'social': {'outgoing', 'party', 'active'},
    'studious': {'quiet', 'academic', 'focused'},
    'active': {'social', 'sporty', 'energetic'},
    'organized': {'clean', 'neat', 'structured'},
}


def same_gender_rule(actor_gender: str, candidate_gender: str) -> int:
    """Default gender rule: same gender is often preferred for roommates"""
    if (actor_gender or '').strip().lower() == (candidate_gender or '').strip().lower():
        return 80
    return 60


def get_compatibility_level(score: float) -> str:
    for threshold, label in COMPATIBILITY_LEVELS:
        if score >= threshold:
            return label
    return LOWEST_LEVEL


@dataclass(frozen=True)
class CompatibilityResult:
    age_score: int
    gender_score: int
    university_score: int
    lifestyle_score: int
    interests_score: int
    overall_score: float
    level: str

    def as_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class RankedCandidate:
    profile: ProfileSnapshot
    result: CompatibilityResult


class CompatibilityCalculator:
    """Core compatibility scoring algorithm

    Every dimension except gender is symmetric. The gender dimension is
    delegated to a pluggable rule called as ``rule(a.gender, b.gender)``
    where ``a`` is the user asking for the comparison.
    """

    def __init__(self, weights: Optional[Dict[str, float]] = None,
                 gender_rule: Optional[GenderRule] = None):
        config = getattr(settings, 'ROOMMATE_MATCHING', {})
        self.weights = self._normalise_weights(weights or config.get('WEIGHTS') or DEFAULT_WEIGHTS)

        if gender_rule is None:
            rule_path = config.get('GENDER_RULE')
            gender_rule = import_string(rule_path) if rule_path else same_gender_rule
        self.gender_rule = gender_rule

    def calculate(self, profile1: ProfileSnapshot, profile2: ProfileSnapshot) -> CompatibilityResult:
        """Calculate overall compatibility between two profiles"""
        scores = {
            'age': self._calculate_age_compatibility(profile1.age, profile2.age),
            'gender': self._calculate_gender_compatibility(profile1.gender, profile2.gender),
            'university': self._calculate_university_compatibility(profile1.university, profile2.university),
            'lifestyle': self._calculate_lifestyle_compatibility(profile1.lifestyle, profile2.lifestyle),
            'interests': self._calculate_interests_compatibility(profile1.interests, profile2.interests),
        }

        overall_score = sum(scores[component] * weight for component, weight in self.weights.items())
        overall_score = round(min(100.0, max(0.0, overall_score)), 2)

        return CompatibilityResult(
            age_score=scores['age'],
            gender_score=scores['gender'],
            university_score=scores['university'],
            lifestyle_score=scores['lifestyle'],
            interests_score=scores['interests'],
            overall_score=overall_score,
            level=get_compatibility_level(overall_score),
        )

    def describe(self, profile1: ProfileSnapshot, profile2: ProfileSnapshot,
                 result: CompatibilityResult) -> Dict[str, str]:
        """Human-readable explanation for each dimension"""
        age_gap = abs(profile1.age - profile2.age)
        if age_gap == 0:
            age_description = "Same age - perfect match!"
        elif age_gap <= 2:
            age_description = f"{age_gap} year(s) difference - very compatible"
        else:
            age_description = f"{age_gap} year(s) difference - some age gap"

        if result.gender_score < 50:
            gender_description = "Gender preferences do not match"
        elif _normalise(profile1.gender) == _normalise(profile2.gender):
            gender_description = "Same gender - often preferred for roommates"
        else:
            gender_description = "Different genders - still compatible"

        if result.university_score == 100:
            university_description = "Same university - great for commuting together"
        else:
            university_description = "Different universities - manageable"

        if _normalise(profile1.lifestyle) == _normalise(profile2.lifestyle):
            lifestyle_description = "Same lifestyle - excellent compatibility"
        elif result.lifestyle_score > 60:
            lifestyle_description = "Compatible lifestyles"
        else:
            lifestyle_description = "Different lifestyles - may need compromise"

        if result.interests_score >= 70:
            interests_description = "Many shared interests - great for bonding"
        elif result.interests_score >= 40:
            interests_description = "Some common interests - good foundation"
        else:
            interests_description = "Different interests - opportunity to learn from each other"

        return {
            'age': age_description,
            'gender': gender_description,
            'university': university_description,
            'lifestyle': lifestyle_description,
            'interests': interests_description,
        }

    def rank_candidates(self, actor: ProfileSnapshot, candidates: Iterable[ProfileSnapshot]) -> List[RankedCandidate]:
        """Score candidates against actor, best first, ties broken by user id"""
        ranked = [
            RankedCandidate(profile=candidate, result=self.calculate(actor, candidate))
            for candidate in candidates
        ]
        ranked.sort(key=lambda item: (-item.result.overall_score, item.profile.user_id))
        return ranked

    def _calculate_age_compatibility(self, age1: int, age2: int) -> int:
        age_gap = abs(age1 - age2)
        if age_gap in AGE_GAP_SCORES:
            return AGE_GAP_SCORES[age_gap]
        return max(0, 50 - (age_gap - 5) * 5)

    def _calculate_gender_compatibility(self, gender1: str, gender2: str) -> int:
        score = self.gender_rule(gender1, gender2)
        return int(min(100, max(0, score)))

    def _calculate_university_compatibility(self, university1: str, university2: str) -> int:
        if _normalise(university1) == _normalise(university2):
            return 100
        return 40

    def _calculate_lifestyle_compatibility(self, lifestyle1: str, lifestyle2: str) -> int:
        life1 = _normalise(lifestyle1)
        life2 = _normalise(lifestyle2)

        if life1 == life2:
            return 100
        if life2 in LIFESTYLE_AFFINITIES.get(life1, ()) or life1 in LIFESTYLE_AFFINITIES.get(life2, ()):
            return 75
        return 30

    def _calculate_interests_compatibility(self, interests1: str, interests2: str) -> int:
        tags1 = parse_interests(interests1)
        tags2 = parse_interests(interests2)

        if not tags1 or not tags2:
            return 50  # Neutral score for missing data

        common = len(tags1 & tags2)
        if common == 0:
            return 20
        return int(round(common / max(len(tags1), len(tags2)) * 100))

    @staticmethod
    def _normalise_weights(weights: Dict[str, float]) -> Dict[str, float]:
        missing = set(DEFAULT_WEIGHTS) - set(weights)
        if missing:
            raise ValueError(f"Missing compatibility weights: {', '.join(sorted(missing))}")

        total = sum(weights[component] for component in DEFAULT_WEIGHTS)
        if total <= 0:
            logger.warning(f"Compatibility weights sum to {total}, falling back to defaults")
            return DEFAULT_WEIGHTS.copy()
        return {component: weights[component] / total for component in DEFAULT_WEIGHTS}


def _normalise(value: str) -> str:
    return (value or '').strip().lower()
