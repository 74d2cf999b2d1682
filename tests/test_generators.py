import random
from fractions import Fraction
from math import gcd

import pytest

from core.errors import InvalidLevelError, RuleConfigurationError, UnknownSkillError
from core.rules import FRACTIONS_RULES, PROGRESSIONS, RATIOS_RULES
from generators import decimal_defender, fractions_puzzle, math_facts, math_rush, ratios
from generators.question import Question, make_question_id, numeric_distractors
from generators.question_generator import MODULE_SKILLS, QuestionGenerator, generate

SEEDS = range(40)


def _ratio_parts(text: str):
    a, b = text.split(":")
    return int(a), int(b)


def _fraction_parts(text: str):
    num, den = text.split("/")
    return int(num), int(den)


# --------------------------------------------------------------------------- #
# Shared helpers
# --------------------------------------------------------------------------- #

def test_question_id_is_a_content_signature() -> None:
    assert make_question_id("math_facts", "addition", 3, 4) == "math_facts:addition:3:4"
    assert make_question_id("ratios", "equivalents", 1, "x:2 = 6:4") == "ratios:equivalents:1:x:2=6:4"
    assert make_question_id("fractions", "define") == "fractions:define"


def test_question_rejects_unknown_answer_kind() -> None:
    with pytest.raises(RuleConfigurationError):
        Question(id="x", module="m", skill="s", level=1, prompt="?", correct_answer="1", answer_kind="essay")


@pytest.mark.parametrize("answer", [0, 1, 2, 7, 50, 999])
def test_numeric_distractors_are_distinct_and_non_negative(answer: int) -> None:
    rng = random.Random(answer)
    wrong = numeric_distractors(answer, rng)
    assert len(wrong) == 3
    assert len(set(wrong)) == 3
    assert answer not in wrong
    assert all(value >= 0 for value in wrong)


# --------------------------------------------------------------------------- #
# Math Facts
# --------------------------------------------------------------------------- #

@pytest.mark.parametrize("operation", list(math_facts.SYMBOLS))
@pytest.mark.parametrize("grade", range(0, 8))
def test_math_facts_answers_match_operands(operation: str, grade: int) -> None:
    rng = random.Random(grade)
    for _ in range(10):
        question = math_facts.generate_math_fact(operation, grade, rng)
        a, b = question.payload["num1"], question.payload["num2"]
        answer = int(question.correct_answer)

        if operation == "addition":
            assert answer == a + b
        elif operation == "subtraction":
            assert answer == a - b
            assert answer >= 0
        elif operation == "multiplication":
            assert answer == a * b
        else:
            assert a == answer * b

        assert question.correct_answer in question.options
        assert len(set(question.options)) == 4
        assert question.answer_kind == "numeric"


def test_math_facts_rejects_unknown_operation() -> None:
    with pytest.raises(UnknownSkillError):
        math_facts.generate_math_fact("modulo", 3, random.Random(1))
    with pytest.raises(RuleConfigurationError):
        math_facts.generate_math_fact("addition", -1, random.Random(1))


# --------------------------------------------------------------------------- #
# Math Rush
# --------------------------------------------------------------------------- #

@pytest.mark.parametrize("operator", list(PROGRESSIONS))
def test_every_rush_step_generates(operator: str) -> None:
    rng = random.Random(3)
    for step in PROGRESSIONS[operator]:
        for _ in range(5):
            question = math_rush.generate_rush_question(operator, rng, step)
            a, b = question.payload["num1"], question.payload["num2"]
            answer = int(question.correct_answer)
            assert question.payload["type"] == step
            assert answer >= 0
            if operator == "division":
                assert b * answer == a


def test_rush_fact_families_follow_their_pattern() -> None:
    rng = random.Random(11)
    for _ in range(20):
        make_ten = math_rush.generate_rush_question("addition", rng, "Make 10")
        assert make_ten.correct_answer == "10"

        double = math_rush.generate_rush_question("multiplication", rng, "Multiply Doubles")
        assert double.payload["num1"] == double.payload["num2"]

        seven = math_rush.generate_rush_question("division", rng, "Divide by 7")
        assert seven.payload["num2"] == 7


def test_mixed_rush_set_rotates_operators() -> None:
    questions = math_rush.generate_rush_set("mixed", random.Random(5), count=8)
    operators = [q.skill for q in questions]
    assert operators == ["addition", "subtraction", "multiplication", "division"] * 2


@pytest.mark.parametrize("step", ["Adding 7", "Make 10", "Divide by 4", "Multiply Doubles"])
def test_mixed_rush_with_step_uses_the_owning_operator(step: str) -> None:
    for seed in range(40):
        question = math_rush.generate_rush_question("mixed", random.Random(seed), step)
        assert question.payload["type"] == step
        assert step in PROGRESSIONS[question.skill]


def test_mixed_rush_rejects_unknown_step() -> None:
    for seed in range(10):
        with pytest.raises(UnknownSkillError):
            math_rush.generate_rush_question("mixed", random.Random(seed), "Adding 99")


def test_rush_rejects_step_from_another_operator() -> None:
    with pytest.raises(UnknownSkillError):
        math_rush.generate_rush_question("addition", random.Random(1), "Divide by 2")


# --------------------------------------------------------------------------- #
# Ratios
# --------------------------------------------------------------------------- #

def test_write_form_fixed_question() -> None:
    question = ratios.generate_write_form_question(3, 4, "to", "colon")
    assert question.correct_answer == "3:4"
    assert "3 to 4" in question.prompt
    assert '"a:b"' in question.prompt

    from_fraction = ratios.generate_write_form_question(3, 4, "fraction", "colon")
    assert from_fraction.correct_answer == "3:4"
    assert "3/4" in from_fraction.prompt

    # A question never shows and asks for the same format, so "3:4" as the
    # shown form and "3:4" as the expected answer need separate questions.
    from_colon = ratios.generate_write_form_question(3, 4, "colon", "to")
    assert "3:4" in from_colon.prompt
    assert from_colon.correct_answer == "3 to 4"


def test_write_form_never_asks_for_the_given_format() -> None:
    for seed in SEEDS:
        question = ratios.generate("write_form", 2, random.Random(seed))
        payload = question.payload
        assert payload["given_format"] != payload["requested_format"]
        assert max(payload["a"], payload["b"]) <= RATIOS_RULES["levels"][2]["max_value"]


def test_equivalents_level_one_missing_value() -> None:
    for seed in SEEDS:
        question = ratios.generate("equivalents", 1, random.Random(seed))
        payload = question.payload
        k = payload["multiplier"]
        assert question.correct_answer == str(payload["a"])
        assert payload["equation"] == f"x:{payload['b']} = {payload['a'] * k}:{payload['b'] * k}"


def test_equivalents_level_two_is_lowest_terms() -> None:
    for seed in SEEDS:
        question = ratios.generate("equivalents", 2, random.Random(seed))
        a, b = _ratio_parts(question.correct_answer)
        assert gcd(a, b) == 1
        assert ratios.is_equivalent_ratio(a, b, question.payload["a"], question.payload["b"])


@pytest.mark.parametrize("level", [3, 4, 5])
def test_equivalents_multi_select_options(level: int) -> None:
    for seed in SEEDS:
        question = ratios.generate("equivalents", level, random.Random(seed))
        base_a, base_b = _ratio_parts(question.payload["base_ratio"])

        assert question.is_multi_select
        assert len(question.options) == 5
        assert len(set(question.options)) == 5
        assert len(question.correct_options) >= 1
        assert set(question.correct_options) <= set(question.options)

        for option in question.options:
            x, y = _ratio_parts(option)
            equivalent = ratios.is_equivalent_ratio(base_a, base_b, x, y)
            assert equivalent == (option in question.correct_options)


def test_visual_identification_uses_both_colours() -> None:
    for seed in SEEDS:
        question = ratios.generate("visual_identification", 1, random.Random(seed))
        payload = question.payload
        colours = {shape["color"] for shape in payload["shapes"]}
        assert colours == {"blue", "orange"}
        assert payload["blue_count"] + payload["orange_count"] == payload["total_shapes"]
        first, second = _ratio_parts(question.correct_answer)
        assert first > 0 and second > 0


def test_ratios_unknown_level_and_skill() -> None:
    with pytest.raises(RuleConfigurationError):
        ratios.generate("write_form", 9, random.Random(1))
    with pytest.raises(UnknownSkillError):
        ratios.generate("percentages", 1, random.Random(1))


def test_ratio_set_has_one_skill_and_level() -> None:
    questions = ratios.generate_ratio_set("equivalents", 2, random.Random(4))
    assert len(questions) == RATIOS_RULES["question_count"]
    assert {(q.skill, q.level) for q in questions} == {("equivalents", 2)}
    assert len(ratios.generate_ratio_set("write_form", 1, random.Random(4), count=3)) == 3


# --------------------------------------------------------------------------- #
# Fractions
# --------------------------------------------------------------------------- #

def test_fraction_tiers_climb_every_four_questions() -> None:
    tiers = [fractions_puzzle.level_for_index(i) for i in range(FRACTIONS_RULES["question_count"])]
    assert tiers == [1] * 4 + [2] * 4 + [3] * 4 + [4] * 4 + [5] * 4
    assert fractions_puzzle.level_for_index(40) == 5


def test_fraction_set_covers_every_tier() -> None:
    questions = fractions_puzzle.generate_fraction_set("simplify", random.Random(2))
    assert len(questions) == 20
    assert sorted({q.level for q in questions}) == [1, 2, 3, 4, 5]


def test_gcd_simplify_answer() -> None:
    for seed in SEEDS:
        question = fractions_puzzle.generate("gcdSimplify", 2, random.Random(seed))
        num, den = question.payload["fraction"]["num"], question.payload["fraction"]["den"]
        g, simplified = question.correct_answer.split(",")
        assert int(g) == gcd(num, den)
        assert Fraction(*_fraction_parts(simplified)) == Fraction(num, den)


@pytest.mark.parametrize("level", [2, 3, 4, 5])
def test_fraction_equivalent_multi_select(level: int) -> None:
    for seed in SEEDS:
        question = fractions_puzzle.generate("equivalent", level, random.Random(seed))
        base = Fraction(question.payload["fraction"]["num"], question.payload["fraction"]["den"])

        assert question.is_multi_select
        assert len(question.correct_options) >= 1
        for option in question.options:
            equal = Fraction(*_fraction_parts(option)) == base
            assert equal == (option in question.correct_options)


def test_fraction_equivalent_level_one_is_fill_in() -> None:
    question = fractions_puzzle.generate("equivalent", 1, random.Random(4))
    assert question.answer_kind == "numeric"
    assert "?" in question.payload["equation"]


def test_fraction_subtraction_stays_positive() -> None:
    for seed in SEEDS:
        question = fractions_puzzle.generate("addSub", 3, random.Random(seed))
        assert Fraction(*_fraction_parts(question.correct_answer)) > 0


def test_mixed_improper_round_trip_values() -> None:
    assert fractions_puzzle.to_mixed(7, 3) == "2 1/3"
    assert fractions_puzzle.to_mixed(6, 3) == "2"


def test_fraction_unknown_tier() -> None:
    with pytest.raises(RuleConfigurationError):
        fractions_puzzle.generate("define", 6, random.Random(1))


# --------------------------------------------------------------------------- #
# Decimal Defender
# --------------------------------------------------------------------------- #

def test_rounding_is_half_up() -> None:
    from decimal import Decimal

    assert decimal_defender.quantize(Decimal("2.345"), 2) == Decimal("2.35")
    assert decimal_defender.quantize(Decimal("2.5"), 0) == Decimal("3")


def test_decimal_arithmetic_has_no_float_noise() -> None:
    for seed in SEEDS:
        question = decimal_defender.generate("addition", 3, random.Random(seed))
        assert len(question.correct_answer.split(".")[1]) == 2
        assert question.correct_answer in question.options


def test_comparing_answer_is_a_strict_relation() -> None:
    for seed in SEEDS:
        question = decimal_defender.generate("comparing", 3, random.Random(seed))
        assert question.correct_answer in (">", "<")
        assert question.options == decimal_defender.COMPARISON_OPTIONS


def test_decimal_set_cycles_skills() -> None:
    questions = decimal_defender.generate_decimal_set(random.Random(1))
    assert [q.skill for q in questions] == ["rounding", "comparing", "addition", "subtraction", "place_value"]


@pytest.mark.parametrize("level, top", [(3, 10), (4, 20), (5, 50), (6, 100)])
def test_decimal_operands_scale_with_level(level: int, top: int) -> None:
    from decimal import Decimal

    for seed in SEEDS:
        rng = random.Random(seed)
        added = decimal_defender.generate("addition", level, rng)
        assert Decimal(added.payload["a"]) < top and Decimal(added.payload["b"]) < top

        subtracted = decimal_defender.generate("subtraction", level, rng)
        assert Decimal(subtracted.correct_answer) > 0
        assert Decimal(subtracted.payload["a"]) < top + 3

        rounded = decimal_defender.generate("rounding", level, rng)
        assert Decimal(rounded.payload["value"]) < top * 10

    questions = decimal_defender.generate_decimal_set(random.Random(1), level=level)
    assert {q.level for q in questions} == {level}


@pytest.mark.parametrize("level", [0, 2, 7])
def test_decimal_unknown_level(level: int) -> None:
    with pytest.raises(RuleConfigurationError):
        decimal_defender.generate("place_value", level, random.Random(1))


# --------------------------------------------------------------------------- #
# Registry
# --------------------------------------------------------------------------- #

LOWEST_LEVEL = {"math_facts": 0, "math_rush": 0, "ratios": 1, "fractions": 1, "decimals": 3}


def test_registry_covers_every_module_skill() -> None:
    for module, skills in MODULE_SKILLS.items():
        for skill in skills:
            question = generate(module, skill, LOWEST_LEVEL[module], random.Random(0))
            assert question.module == module


def test_registry_unknown_module_and_skill() -> None:
    with pytest.raises(UnknownSkillError):
        generate("geometry", "area", 1, random.Random(0))
    with pytest.raises(UnknownSkillError):
        generate("ratios", "area", 1, random.Random(0))


@pytest.mark.parametrize(
    "module, skill, level",
    [
        ("ratios", "write_form", 9),
        ("fractions", "define", 0),
        ("decimals", "comparing", 1),
        ("math_facts", "addition", -1),
    ],
)
def test_registry_rejects_out_of_range_levels(module: str, skill: str, level: int) -> None:
    with pytest.raises(InvalidLevelError) as info:
        generate(module, skill, level, random.Random(0))
    assert info.value.status_code == 400


def test_registry_ignores_level_for_math_rush() -> None:
    assert generate("math_rush", "addition", 99, random.Random(0)).module == "math_rush"


def test_seeded_generator_is_reproducible() -> None:
    first = QuestionGenerator(seed=99)
    second = QuestionGenerator(seed=99)
    for skill in ("write_form", "equivalents", "visual_identification"):
        assert first.generate("ratios", skill, 3) == second.generate("ratios", skill, 3)


def test_generator_avoids_excluded_ids() -> None:
    generator = QuestionGenerator(seed=1)
    seen = generator.generate("math_facts", "multiplication", 4).id
    for _ in range(10):
        assert generator.generate("math_facts", "multiplication", 4, exclude=[seen]).id != seen


def test_generator_serves_repeat_when_space_is_exhausted() -> None:
    # "Make 10" has only 11 distinct questions
    generator = QuestionGenerator(seed=1, max_attempts=3)
    every_id = {
        math_rush.generate_rush_question("addition", random.Random(seed), "Make 10").id
        for seed in range(200)
    }
    question = generator.generate("math_rush", "addition", 0, step="Make 10", exclude=every_id)
    assert question.id in every_id
