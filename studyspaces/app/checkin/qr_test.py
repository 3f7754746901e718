"""Unit tests for QR payload handling."""

import unittest

from studyspaces.app.checkin import qr


class TestQrCodes(unittest.TestCase):
    """Tests for generate_qr_code and validate_qr_code."""

    def test_generate(self) -> None:
        """Payloads are the prefix followed by the location id."""
        self.assertEqual(qr.generate_qr_code('42'), 'studyspaces-gent-42')

    def test_round_trip(self) -> None:
        """validate_qr_code inverts generate_qr_code for non-empty ids."""
        for location_id in ['1', 'L1', 'studyspaces-gent-nested', 'with space', 'é']:
            with self.subTest(location_id=location_id):
                self.assertEqual(
                    qr.validate_qr_code(qr.generate_qr_code(location_id)), location_id
                )

    def test_foreign_payloads_rejected(self) -> None:
        """Strings without the prefix are not location codes."""
        for code in ['', 'https://example.com', 'studyspaces-', 'STUDYSPACES-GENT-1', ' studyspaces-gent-1']:
            with self.subTest(code=code):
                self.assertIsNone(qr.validate_qr_code(code))

    def test_bare_prefix_rejected(self) -> None:
        """The prefix alone carries no location id."""
        self.assertIsNone(qr.validate_qr_code('studyspaces-gent-'))


if __name__ == '__main__':
    unittest.main()
