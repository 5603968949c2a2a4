#!/usr/bin/env python3
"""
Unit tests for score(): weighting, neutrality, ranking and determinism.
"""

import unittest

from core.matchmaking import (
    Candidate,
    GeoPoint,
    PriceRange,
    SearchQuery,
    WeightProfile,
    score,
)
from core.matchmaking.models import FACTORS

ORIGIN = GeoPoint(-6.2, 106.8)
# ~20 km north of ORIGIN
FAR_POINT = GeoPoint(-6.2 + 0.18, 106.8)
# ~2 km north of ORIGIN
NEAR_POINT = GeoPoint(-6.2 + 0.018, 106.8)


def make_candidates():
    return [
        Candidate(
            id="c-budi", name="Budi", subjects=("Matematika", "Fisika"), hourly_price=150000,
            location=NEAR_POINT, experience="8 tahun", availability=("monday",),
            teaching_styles=("interactive",), rating=4.5
        ),
        Candidate(
            id="a-sari", name="Sari", subjects=("Kimia",), hourly_price=90000,
            location=FAR_POINT, experience="S1 Kimia", availability=("tuesday",),
            teaching_styles=("lecture",), rating=3.5
        ),
        Candidate(
            id="b-andi", name="Andi", subjects=("Matematika",), hourly_price=None,
            location=None, experience="", availability=(), teaching_styles=(), rating=4.5
        ),
    ]


class TestScoreFunction(unittest.TestCase):

    def setUp(self):
        self.candidates = make_candidates()
        self.weights = WeightProfile(
            distance=0.2, price=0.15, experience=0.15, availability=0.1, subjects=0.3, rating=0.1
        )
        self.query = SearchQuery(
            subjects=("matematika",),
            location=ORIGIN,
            radius_km=10,
            price_range=PriceRange(100000, 200000),
            availability=("monday",),
            min_rating=4.0,
            experience_tier="senior",
        )

    def test_01_empty_candidates(self):
        print("\n📊 UNIT Test 1: Empty Candidate List")
        self.assertEqual(score([], self.query, self.weights), [])
        print("  ✓ Empty in, empty out")

    def test_02_breakdown_has_every_factor_in_unit_interval(self):
        print("\n📊 UNIT Test 2: Breakdown Covers Every Factor")
        for result in score(self.candidates, self.query, self.weights):
            self.assertEqual(list(result.match_breakdown.keys()), list(FACTORS))
            for value in result.match_breakdown.values():
                self.assertGreaterEqual(value, 0.0)
                self.assertLessEqual(value, 1.0)
        print("  ✓ Six sub-scores, all within [0, 1]")

    def test_03_weight_zero_removes_exactly_its_contribution(self):
        print("\n📊 UNIT Test 3: Weight-Zero Invariant")
        base = {r.candidate.id: r for r in score(self.candidates, self.query, self.weights)}
        for factor in FACTORS:
            values = self.weights.as_dict()
            old_weight = values[factor]
            values[factor] = 0.0
            zeroed = {r.candidate.id: r for r in score(self.candidates, self.query, WeightProfile(**values))}
            for cid, result in base.items():
                expected = result.match_score - old_weight * result.match_breakdown[factor]
                self.assertAlmostEqual(zeroed[cid].match_score, expected, places=12)
        print("  ✓ Each factor's term is additive and removable")

    def test_04_neutral_query_scores_sum_of_weights(self):
        print("\n📊 UNIT Test 4: Neutral Query")
        weights = WeightProfile(
            distance=0.2, price=0.15, experience=0.15, availability=0.1, subjects=0.3, rating=0.0
        )
        results = score(self.candidates, SearchQuery(), weights)
        total = sum(weights.as_dict().values())
        for result in results:
            self.assertAlmostEqual(result.match_score, total)
            self.assertIsNone(result.distance_km)
        # All tie on score; rating then id decides
        self.assertEqual([r.candidate.id for r in results], ["b-andi", "c-budi", "a-sari"])
        print(f"  ✓ Every score = {total}")

    def test_05_all_zero_weights_rank_by_tie_break(self):
        print("\n📊 UNIT Test 5: All-Zero Weights")
        results = score(self.candidates, self.query, WeightProfile())
        self.assertTrue(all(r.match_score == 0.0 for r in results))
        self.assertEqual([r.candidate.id for r in results], ["b-andi", "c-budi", "a-sari"])
        print("  ✓ Ranking falls back to rating desc, id asc")

    def test_06_distance_monotonicity(self):
        print("\n📊 UNIT Test 6: Distance Monotonicity")
        twin = dict(subjects=("Matematika",), hourly_price=150000, experience="6 years",
                    availability=("monday",), rating=4.0)
        near = Candidate(id="z-near", name="Near", location=NEAR_POINT, **twin)
        far = Candidate(id="a-far", name="Far", location=GeoPoint(-6.2 + 0.05, 106.8), **twin)
        results = score([far, near], self.query, self.weights)
        self.assertEqual([r.candidate.id for r in results], ["z-near", "a-far"])
        self.assertLess(results[0].distance_km, results[1].distance_km)
        print(f"  ✓ {results[0].distance_km:.2f} km ranks above {results[1].distance_km:.2f} km")

    def test_07_determinism(self):
        print("\n📊 UNIT Test 7: Determinism")
        first = score(self.candidates, self.query, self.weights)
        second = score(self.candidates, self.query, self.weights)
        self.assertEqual([r.candidate.id for r in first], [r.candidate.id for r in second])
        self.assertEqual([r.match_score for r in first], [r.match_score for r in second])
        print("  ✓ Identical order and scores")

    def test_08_does_not_mutate_input(self):
        candidates = make_candidates()
        snapshot = list(candidates)
        score(candidates, self.query, self.weights)
        self.assertEqual(candidates, snapshot)

    def test_09_example_scenario(self):
        print("\n📊 UNIT Test 9: Two Math Tutors, 2 km vs 20 km")
        a = Candidate(id="A", name="A", subjects=("math",), hourly_price=100, location=ORIGIN)
        b = Candidate(id="B", name="B", subjects=("math",), hourly_price=100, location=FAR_POINT)
        query = SearchQuery(subjects=("math",), location=ORIGIN, radius_km=10)
        weights = WeightProfile(distance=0.5, subjects=0.5)

        results = score([b, a], query, weights, origin=ORIGIN)

        self.assertEqual([r.candidate.id for r in results], ["A", "B"])
        self.assertAlmostEqual(results[0].match_score, 1.0)
        self.assertEqual(results[1].match_breakdown["distance"], 0.0)
        self.assertAlmostEqual(results[1].match_score, 0.5)
        self.assertGreater(results[1].distance_km, 10)
        print(f"  ✓ A={results[0].match_score:.2f}, B={results[1].match_score:.2f}")

    def test_10_below_min_rating_kept_unless_filtered(self):
        query = SearchQuery(min_rating=4.0)
        results = score(self.candidates, query, self.weights)
        sari = next(r for r in results if r.candidate.id == "a-sari")
        self.assertEqual(sari.match_breakdown["rating"], 0.0)
        self.assertEqual(results[-1].candidate.id, "a-sari")

        filtered = score(self.candidates, SearchQuery(min_rating=4.0, exclude_below_min_rating=True), self.weights)
        self.assertNotIn("a-sari", [r.candidate.id for r in filtered])

    def test_11_radius_filter_keeps_unknown_locations(self):
        query = SearchQuery(location=ORIGIN, radius_km=10, restrict_to_radius=True)
        ids = [r.candidate.id for r in score(self.candidates, query, self.weights)]
        self.assertIn("c-budi", ids)
        self.assertIn("b-andi", ids)
        self.assertNotIn("a-sari", ids)

        # Without the flag the far candidate stays, scored 0 on distance
        ids = [r.candidate.id for r in score(self.candidates, SearchQuery(location=ORIGIN, radius_km=10), self.weights)]
        self.assertIn("a-sari", ids)

    def test_12_teaching_style_filter(self):
        query = SearchQuery(teaching_styles=("Interactive",), require_teaching_style=True)
        ids = [r.candidate.id for r in score(self.candidates, query, self.weights)]
        self.assertEqual(ids, ["c-budi"])

    def test_13_default_radius_used_without_query_radius(self):
        query = SearchQuery(location=ORIGIN)
        results = score(self.candidates, query, self.weights, default_radius_km=40.0)
        sari = next(r for r in results if r.candidate.id == "a-sari")
        self.assertAlmostEqual(sari.match_breakdown["distance"], 1.0 - sari.distance_km / 40.0)

    def test_14_origin_overrides_query_location(self):
        query = SearchQuery(location=ORIGIN, radius_km=50)
        results = score(self.candidates, query, self.weights, origin=FAR_POINT)
        sari = next(r for r in results if r.candidate.id == "a-sari")
        self.assertAlmostEqual(sari.distance_km, 0.0)


if __name__ == "__main__":
    unittest.main()
