"""
Unit tests for the delivery distance calculator
"""
import pytest

from storefront.utils.distance import ROUTE_CORRECTION_FACTOR, calculate_distance


class TestCalculateDistance:

    def test_identical_coordinates_are_zero(self):
        assert calculate_distance(-23.55, -46.63, -23.55, -46.63) == 0

    def test_is_symmetric(self):
        there = calculate_distance(-23.55, -46.63, -22.90, -43.20)
        back = calculate_distance(-22.90, -43.20, -23.55, -46.63)
        assert there == back

    def test_sao_paulo_to_rio_includes_route_correction(self):
        """Great-circle SP -> RJ is ~360km; with the 1.3 factor ~470km"""
        distance = calculate_distance(-23.55, -46.63, -22.90, -43.20)
        assert 450 < distance < 490

    def test_grows_with_separation(self):
        near = calculate_distance(0, 0, 0, 0.01)
        far = calculate_distance(0, 0, 0, 0.1)
        farther = calculate_distance(0, 0, 0, 1)
        assert near < far < farther

    def test_rounds_to_one_decimal(self):
        distance = calculate_distance(-23.5505, -46.6333, -23.5614, -46.6559)
        assert distance == round(distance, 1)

    def test_one_degree_of_longitude_at_equator(self):
        # 2 * pi * 6371 / 360 = 111.19km
        expected = round(111.19 * ROUTE_CORRECTION_FACTOR, 1)
        assert calculate_distance(0, 0, 0, 1) == pytest.approx(expected, abs=0.1)
