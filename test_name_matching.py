import unittest

from utils.name_matching import (
    Candidate,
    ClosePolicy,
    Feedback,
    NoMatchReason,
    evaluate_roster_guess,
    evaluate_single_guess,
    levenshtein,
    normalize_for_match,
    similarity,
)


class TestNormalize(unittest.TestCase):
    def test_case_and_diacritics(self):
        self.assertEqual(normalize_for_match("  JOÃO "), "joao")
        self.assertEqual(normalize_for_match("Fágner"), "fagner")
        self.assertEqual(normalize_for_match("Cássio"), normalize_for_match("CASSIO"))

    def test_punctuation_and_spaces(self):
        self.assertEqual(normalize_for_match("Ji-Paraná"), "jiparana")
        self.assertEqual(normalize_for_match("Gabriel    Barbosa"), "gabriel barbosa")
        self.assertEqual(normalize_for_match("D'Alessandro."), "dalessandro")

    def test_empty(self):
        self.assertEqual(normalize_for_match("  .. "), "")
        self.assertEqual(normalize_for_match(""), "")


class TestDistance(unittest.TestCase):
    def test_levenshtein(self):
        self.assertEqual(levenshtein("kitten", "sitting"), 3)
        self.assertEqual(levenshtein("", "abc"), 3)
        self.assertEqual(levenshtein("abc", "abc"), 0)

    def test_similarity_bounds(self):
        self.assertEqual(similarity("abc", "abc"), 1.0)
        self.assertEqual(similarity("", "abc"), 0.0)
        self.assertAlmostEqual(similarity("abcd", "abce"), 0.75)

    def test_similarity_of_empty_strings(self):
        self.assertEqual(similarity("", ""), 1.0)
        self.assertEqual(levenshtein("jo", "ab"), 2)


class TestSingleGuess(unittest.TestCase):
    def test_exact_match_ignores_case_and_accents(self):
        for guess in ("joão", "JOAO", "Joao", "  joão  "):
            self.assertEqual(evaluate_single_guess(guess, ["João"]), Feedback.CORRECT, guess)

    def test_any_name_variant_wins(self):
        self.assertEqual(evaluate_single_guess("gabigol", ["Gabigol", "Gabriel Barbosa"]), Feedback.CORRECT)
        self.assertEqual(evaluate_single_guess("gabriel barbosa", ["Gabigol", "Gabriel Barbosa"]), Feedback.CORRECT)

    def test_single_token_is_close_not_correct(self):
        self.assertEqual(evaluate_single_guess("Gabriel", ["Gabriel Barbosa"]), Feedback.CLOSE)
        self.assertEqual(evaluate_single_guess("barbosa", ["Gabriel Barbosa"]), Feedback.CLOSE)

    def test_typo_is_close(self):
        self.assertEqual(evaluate_single_guess("Gabriel Barbosaa", ["Gabriel Barbosa"]), Feedback.CLOSE)

    def test_unrelated_is_wrong(self):
        self.assertEqual(evaluate_single_guess("Zico", ["Gabriel Barbosa"]), Feedback.WRONG)
        self.assertNotEqual(evaluate_single_guess("Barbosa FC", ["Gabriel Barbosa"]), Feedback.CORRECT)

    def test_short_name_needs_more_than_a_random_letter(self):
        self.assertEqual(evaluate_single_guess("x", ["Jô"]), Feedback.WRONG)
        self.assertEqual(evaluate_single_guess("ab", ["Jô"]), Feedback.WRONG)
        self.assertEqual(evaluate_single_guess("jo", ["Jô"]), Feedback.CORRECT)

    def test_policy_is_configurable(self):
        strict = ClosePolicy(similarity=1.1, max_distance=0, min_token_length=100)
        self.assertEqual(evaluate_single_guess("Gabriel", ["Gabriel Barbosa"], strict), Feedback.WRONG)
        self.assertEqual(evaluate_single_guess("gabriel barbosa", ["Gabriel Barbosa"], strict), Feedback.CORRECT)

    def test_empty_guess_is_wrong(self):
        self.assertEqual(evaluate_single_guess("   ", ["Gabriel Barbosa"]), Feedback.WRONG)

    def test_deterministic(self):
        verdicts = {evaluate_single_guess("Gabriel", ["Gabriel Barbosa"]) for _ in range(5)}
        self.assertEqual(len(verdicts), 1)


class TestRosterGuess(unittest.TestCase):
    def setUp(self):
        self.roster = [
            Candidate(id=1, normalized_name=normalize_for_match("Cássio")),
            Candidate(id=2, normalized_name=normalize_for_match("Fágner")),
            Candidate(id=3, normalized_name=normalize_for_match("Tévez"), aliases=("Carlos Tevez",)),
        ]

    def test_exact_match_returns_candidate(self):
        verdict = evaluate_roster_guess("Cássio", self.roster, set())
        self.assertTrue(verdict.matched)
        self.assertEqual(verdict.candidate_id, 1)

    def test_already_guessed_variant(self):
        verdict = evaluate_roster_guess("Cassio", self.roster, {1})
        self.assertFalse(verdict.matched)
        self.assertEqual(verdict.reason, NoMatchReason.ALREADY_GUESSED)

    def test_alias_match(self):
        verdict = evaluate_roster_guess("carlos tévez", self.roster, set())
        self.assertEqual(verdict.candidate_id, 3)

    def test_no_match(self):
        verdict = evaluate_roster_guess("Ronaldo", self.roster, set())
        self.assertFalse(verdict.matched)
        self.assertEqual(verdict.reason, NoMatchReason.NO_MATCH)

    def test_partial_name_does_not_match(self):
        verdict = evaluate_roster_guess("Cáss", self.roster, set())
        self.assertEqual(verdict.reason, NoMatchReason.NO_MATCH)

    def test_first_remaining_candidate_wins(self):
        roster = [Candidate(id=7, normalized_name="marcelo"), Candidate(id=8, normalized_name="marcelo")]
        self.assertEqual(evaluate_roster_guess("Marcelo", roster, set()).candidate_id, 7)
        self.assertEqual(evaluate_roster_guess("Marcelo", roster, {8}).reason, NoMatchReason.ALREADY_GUESSED)


if __name__ == "__main__":
    unittest.main()
