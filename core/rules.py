"""
rules.py

Rule tables for every practice module: number ranges per grade, level tiers,
skill lists, token rates, and the ordered fact-family curricula used by Math
Rush. It acts as the *knowledge backbone* for the generators, the scoring
rules, and the progression evaluator.

Pure data only. Anything that interprets these tables lives next to the code
that needs it.
"""

OPERATORS = ("addition", "subtraction", "multiplication", "division")

# =============================================================================
# MATH FACTS
# =============================================================================

# K-2: single-digit facts. Gr 3: add/sub to 1 000, x/÷ facts through 10.
# Gr 4: add/sub to 10 000, 2-digit x 2-digit, 4-digit ÷ 1-digit.
# K-2 x/÷ rows are enrichment.
MATH_FACTS_RANGES = {
    "addition": {
        0: {"min1": 1, "max1": 5, "min2": 1, "max2": 5},
        1: {"min1": 1, "max1": 10, "min2": 1, "max2": 10},
        2: {"min1": 1, "max1": 20, "min2": 1, "max2": 20},
        3: {"min1": 100, "max1": 999, "min2": 100, "max2": 999},
        4: {"min1": 1000, "max1": 9999, "min2": 1000, "max2": 9999},
        5: {"min1": 10000, "max1": 99999, "min2": 10000, "max2": 99999},
        6: {"min1": 10000, "max1": 99999, "min2": 10000, "max2": 99999},
        "default": {"min1": 10000, "max1": 99999, "min2": 10000, "max2": 99999},
    },
    "subtraction": {
        0: {"min2": 1, "max2": 3, "min_diff": 0, "max_diff": 4},
        1: {"min2": 1, "max2": 5, "min_diff": 0, "max_diff": 9},
        2: {"min2": 1, "max2": 10, "min_diff": 0, "max_diff": 19},
        3: {"min2": 1, "max2": 999, "min_diff": 0, "max_diff": 999},
        4: {"min2": 1, "max2": 9999, "min_diff": 0, "max_diff": 9999},
        5: {"min2": 1, "max2": 99999, "min_diff": 0, "max_diff": 99999},
        6: {"min2": 1, "max2": 99999, "min_diff": 0, "max_diff": 99999},
        "default": {"min2": 1, "max2": 99999, "min_diff": 0, "max_diff": 99999},
    },
    "multiplication": {
        0: {"min1": 1, "max1": 5, "min2": 1, "max2": 5},
        1: {"min1": 1, "max1": 5, "min2": 1, "max2": 5},
        2: {"min1": 1, "max1": 5, "min2": 1, "max2": 5},
        3: {"min1": 1, "max1": 10, "min2": 1, "max2": 10},
        4: {"min1": 10, "max1": 99, "min2": 10, "max2": 99},
        5: {"min1": 100, "max1": 999, "min2": 10, "max2": 99},
        6: {"min1": 100, "max1": 999, "min2": 10, "max2": 99},
        "default": {"min1": 100, "max1": 999, "min2": 10, "max2": 99},
    },
    "division": {
        0: {"min_divisor": 2, "max_divisor": 5, "min_quotient": 1, "max_quotient": 4},
        1: {"min_divisor": 2, "max_divisor": 5, "min_quotient": 1, "max_quotient": 4},
        2: {"min_divisor": 2, "max_divisor": 5, "min_quotient": 1, "max_quotient": 4},
        3: {"min_divisor": 2, "max_divisor": 10, "min_quotient": 1, "max_quotient": 9},
        4: {"min_divisor": 2, "max_divisor": 9, "min_quotient": 10, "max_quotient": 9999},
        5: {"min_divisor": 2, "max_divisor": 99, "min_quotient": 10, "max_quotient": 999},
        6: {"min_divisor": 2, "max_divisor": 99, "min_quotient": 10, "max_quotient": 999},
        "default": {"min_divisor": 2, "max_divisor": 99, "min_quotient": 10, "max_quotient": 999},
    },
}

MATH_FACTS_CONFIG = {
    "assessment_questions_per_grade": 2,
    "practice_questions_per_session": 6,
    "tokens_per_correct": 1,
    "bonus_tokens_perfect": 4,
    "assessment_completion_tokens": 15,
    "pass_threshold": 0.8,
    "attempts_to_level_change": 4,
    "max_grade_level": 6,
    "min_grade_level": 0,
}

# =============================================================================
# RATIOS
# =============================================================================

RATIOS_RULES = {
    "skills": ("write_form", "equivalents", "visual_identification"),
    "levels": {
        1: {"max_value": 10},
        2: {"max_value": 35},
        3: {"max_value": 50},
        4: {"max_value": 75},
        5: {"max_value": 100},
    },
    "question_count": 5,
    "tokens_per_correct": 1,
    "bonus_tokens_perfect": 5,
    "pass_threshold": 0.8,
}

# =============================================================================
# FRACTIONS PUZZLE
# =============================================================================

FRACTIONS_RULES = {
    "skills": (
        "define",          # identify fraction from a bar
        "gcdSimplify",     # pick the GCD, then type the simplified form
        "simplify",        # type lowest terms
        "equivalent",      # fill-in (tier 1) or multi-select (tier 2+)
        "addSub",          # add or subtract, different denominators
        "mulDiv",          # multiply or divide
        "mixedImproper",   # convert mixed <-> improper
    ),
    # Five internal tiers, auto-advancing every 4 questions.
    "levels": (
        {"max_den": 10},
        {"max_den": 20},
        {"max_den": 30},
        {"max_den": 40},
        {"max_den": 25, "mixed_allowed": True},
    ),
    "questions_per_level": 4,
    "question_count": 20,
    "tokens_per_batch": 3,
    "batch_size": 5,
    "bonus_tokens_perfect": 20,
    "pass_threshold": 0.8,
}

# =============================================================================
# DECIMAL DEFENDER
# =============================================================================

DECIMAL_DEFENDER_RULES = {
    "skills": ("rounding", "comparing", "addition", "subtraction", "place_value"),
    "total_questions": 10,
    "questions_per_session": 5,
    "difficulty_range": (3, 6),
    # largest whole part operands use at each difficulty
    "levels": {
        3: {"max_whole": 10},
        4: {"max_whole": 20},
        5: {"max_whole": 50},
        6: {"max_whole": 100},
    },
    "tokens_per_correct": 4,
    "bonus_tokens_perfect": 10,
    "pass_threshold": 0.8,
}

# =============================================================================
# MATH RUSH
# =============================================================================

MATH_RUSH_RULES = {
    "modes": OPERATORS + ("mixed",),
    "time_settings": {
        "SHORT": {"sec": 60, "tokens_per_batch": 3, "bonus_tokens_perfect": 20},
        "LONG": {"sec": 90, "tokens_per_batch": 2, "bonus_tokens_perfect": 15},
    },
    "batch_size": 5,
    "question_count": 20,
    "assessment_question_count": 24,
    "assessment_mastery_tokens": 50,
    "micro_token_batch": 3,
    "pass_threshold": 0.8,
}

ADDITION_PROGRESSION = (
    "Adding 0 and 1",
    "Adding 10",
    "Adding 2",
    "Adding 3",
    "Adding 4",
    "Adding 5",
    "Mixed 0–5",
    "Adding 6",
    "Adding 7",
    "Adding 8",
    "Adding 9",
    "Doubles to 20",
    "Make 10",
    "Mixed 6-10",
)

SUBTRACTION_PROGRESSION = (
    "Subtract From 0-3",
    "Subtract From 10",
    "Subtract From 4",
    "Subtract From 5",
    "Subtraction Mixed 0-5",
    "Subtract From 6",
    "Subtract From 7",
    "Subtract From 8",
    "Subtract From 9",
    "Subtraction Half of a Double",
    "Subtraction Mixed 6-10",
    "Subtraction Odd Balls",
)

MULTIPLICATION_PROGRESSION = (
    "Multiply by 0 and 1",
    "Multiply by 2",
    "Multiply by 3",
    "Multiply by 4",
    "Multiply by 5",
    "Mixed 0–5",
    "Multiply by 6",
    "Multiply by 7",
    "Multiply by 8",
    "Multiply by 9",
    "Multiply by 10",
    "Multiply by 11",
    "Multiply by 12",
    "Multiply Doubles",
    "Mixed 6–12",
)

DIVISION_PROGRESSION = (
    "Divide by 2",
    "Divide by 3",
    "Divide by 4",
    "Divide by 5",
    "Divide by 6",
    "Mixed 2–6",
    "Divide by 7",
    "Divide by 8",
    "Divide by 9",
    "Divide by 10",
    "Divide by 11",
    "Divide by 12",
    "Mixed 7–12",
)

PROGRESSIONS = {
    "addition": ADDITION_PROGRESSION,
    "subtraction": SUBTRACTION_PROGRESSION,
    "multiplication": MULTIPLICATION_PROGRESSION,
    "division": DIVISION_PROGRESSION,
}

# (step, skip_from_grade): the step stops being required once the learner's
# grade reaches skip_from_grade.
AUTO_SKIP_RULES = {
    "addition": (),
    "subtraction": (),
    "multiplication": (
        ("Multiply by 0 and 1", 6),
        ("Multiply by 2", 6),
    ),
    "division": (
        ("Divide by 2", 6),
    ),
}

# Unparseable grades are treated as this grade when applying auto-skips.
AUTO_SKIP_DEFAULT_GRADE = 3

# Fact-family patterns behind each progression step. Ranges are inclusive.
#   fixed:       one operand from `fixed`, the other from `other`
#   pair:        both operands from their own ranges
#   double:      a + a (or a x a)
#   make_ten:    a + (total - a)
#   minuend:     minuend from `minuend`, subtrahend 0..minuend
#   half_double: 2a - a
#   teen:        minuend 11..18, subtrahend keeps the difference <= 9
#   divisor:     (divisor x quotient) ÷ divisor
FACT_FAMILIES = {
    "addition": {
        "Adding 0 and 1": {"pattern": "fixed", "fixed": (0, 1), "other": (0, 10)},
        "Adding 10": {"pattern": "fixed", "fixed": (10,), "other": (0, 10)},
        **{
            f"Adding {n}": {"pattern": "fixed", "fixed": (n,), "other": (0, 10)}
            for n in range(2, 10)
        },
        "Mixed 0–5": {"pattern": "pair", "first": (0, 5), "second": (0, 5)},
        "Doubles to 20": {"pattern": "double", "range": (0, 10)},
        "Make 10": {"pattern": "make_ten", "total": 10},
        "Mixed 6-10": {"pattern": "fixed", "fixed": tuple(range(6, 11)), "other": (0, 10)},
    },
    "subtraction": {
        "Subtract From 0-3": {"pattern": "minuend", "minuend": (0, 1, 2, 3)},
        "Subtract From 10": {"pattern": "minuend", "minuend": (10,)},
        **{
            f"Subtract From {n}": {"pattern": "minuend", "minuend": (n,)}
            for n in range(4, 10)
        },
        "Subtraction Mixed 0-5": {"pattern": "minuend", "minuend": tuple(range(0, 6))},
        "Subtraction Half of a Double": {"pattern": "half_double", "range": (1, 10)},
        "Subtraction Mixed 6-10": {"pattern": "minuend", "minuend": tuple(range(6, 11))},
        "Subtraction Odd Balls": {"pattern": "teen", "minuend": (11, 18)},
    },
    "multiplication": {
        "Multiply by 0 and 1": {"pattern": "fixed", "fixed": (0, 1), "other": (0, 12)},
        **{
            f"Multiply by {n}": {"pattern": "fixed", "fixed": (n,), "other": (0, 12)}
            for n in range(2, 13)
        },
        "Mixed 0–5": {"pattern": "pair", "first": (0, 5), "second": (0, 5)},
        "Multiply Doubles": {"pattern": "double", "range": (1, 12)},
        "Mixed 6–12": {"pattern": "fixed", "fixed": tuple(range(6, 13)), "other": (0, 12)},
    },
    "division": {
        **{
            f"Divide by {n}": {"pattern": "divisor", "divisor": (n,), "quotient": (1, 12)}
            for n in range(2, 13)
        },
        "Mixed 2–6": {"pattern": "divisor", "divisor": tuple(range(2, 7)), "quotient": (1, 12)},
        "Mixed 7–12": {"pattern": "divisor", "divisor": tuple(range(7, 13)), "quotient": (1, 12)},
    },
}
