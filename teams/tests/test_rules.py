from django.test import SimpleTestCase

from teams.rules import (
    INVITE_CODE_ALPHABET,
    INVITE_CODE_LENGTH,
    can_join_preserving_female_requirement,
    generate_invite_code,
    is_female,
    normalize_invite_code,
)


class GenderRuleTests(SimpleTestCase):
    def test_empty_team_accepts_anyone(self):
        self.assertTrue(can_join_preserving_female_requirement([], "male", 6))
        self.assertTrue(can_join_preserving_female_requirement([], "female", 6))

    def test_non_final_slot_is_never_gated(self):
        self.assertTrue(can_join_preserving_female_requirement(["male"] * 4, "male", 6))
        self.assertTrue(can_join_preserving_female_requirement(["male"] * 3, "male", 5))

    def test_last_slot_refused_to_male_without_female(self):
        self.assertFalse(can_join_preserving_female_requirement(["male"] * 5, "male", 6))
        self.assertFalse(can_join_preserving_female_requirement(["male"] * 4, "male", 5))

    def test_last_slot_open_when_team_has_female(self):
        self.assertTrue(can_join_preserving_female_requirement(["male"] * 4 + ["female"], "male", 6))
        self.assertTrue(can_join_preserving_female_requirement(["male"] * 3 + ["female"], "male", 5))

    def test_last_slot_open_to_female(self):
        self.assertTrue(can_join_preserving_female_requirement(["male"] * 5, "female", 6))
        self.assertTrue(can_join_preserving_female_requirement(["male"] * 4, "female", 5))

    def test_full_team_refuses_everyone(self):
        self.assertFalse(can_join_preserving_female_requirement(["female"] * 6, "female", 6))

    def test_gender_compared_case_insensitively(self):
        self.assertTrue(is_female(" Female "))
        self.assertTrue(can_join_preserving_female_requirement(["Male"] * 5, "FEMALE", 6))
        self.assertFalse(is_female(None))

    def test_default_team_size_is_six(self):
        self.assertFalse(can_join_preserving_female_requirement(["male"] * 5, "male"))
        self.assertTrue(can_join_preserving_female_requirement(["male"] * 4, "male"))


class InviteCodeTests(SimpleTestCase):
    def test_code_shape(self):
        for _ in range(50):
            code = generate_invite_code()
            self.assertEqual(len(code), INVITE_CODE_LENGTH)
            self.assertTrue(set(code) <= set(INVITE_CODE_ALPHABET))

    def test_alphabet_skips_ambiguous_characters(self):
        for ch in "IO01":
            self.assertNotIn(ch, INVITE_CODE_ALPHABET)

    def test_normalize(self):
        self.assertEqual(normalize_invite_code("  ab3cd9 "), "AB3CD9")
        self.assertEqual(normalize_invite_code(None), "")
        self.assertEqual(normalize_invite_code(123456), "")
