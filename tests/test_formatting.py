"""Tests for size formatting."""

import pytest

from wslreclaim.formatting import format_bytes, format_size_kb, is_large


class TestFormatSizeKb:
    def test_kilobytes(self):
        assert format_size_kb(512) == "   512K"

    def test_zero(self):
        assert format_size_kb(0) == "     0K"

    def test_unit_boundaries(self):
        assert format_size_kb(1023).endswith("K")
        assert format_size_kb(1024).endswith("M")
        assert format_size_kb(1048575).endswith("M")
        assert format_size_kb(1048576).endswith("G")

    def test_megabytes_truncate(self):
        assert format_size_kb(1024) == "     1M"
        assert format_size_kb(2047) == "     1M"
        assert format_size_kb(150000) == "   146M"

    def test_whole_gigabyte(self):
        assert format_size_kb(1048576) == "   1.0G"

    def test_tenths_use_truncating_divisor(self):
        assert format_size_kb(1048576 + 104857) == "   1.1G"
        assert format_size_kb(1048576 + 209714) == "   1.2G"
        # One KB short of a tenth stays at .0
        assert format_size_kb(1048576 + 104856) == "   1.0G"

    def test_tenths_never_round_up(self):
        assert format_size_kb(2000000) == "   1.9G"

    def test_tenths_digit_can_overflow(self):
        # 1048575 // 104857 == 10, printed as is
        assert format_size_kb(2097151) == "   1.10G"

    def test_large_values_keep_width_minimum(self):
        assert format_size_kb(1048576 * 1234) == "1234.0G"

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            format_size_kb(-1)

    def test_every_value_is_one_unit_class(self):
        for value in (0, 1, 1023, 1024, 5000, 1048575, 1048576, 10**9):
            assert format_size_kb(value)[-1] in "KMG"


class TestIsLarge:
    def test_gigabyte_class_is_large(self):
        assert is_large(1048576)
        assert not is_large(1048575)


class TestFormatBytes:
    def test_bytes_converted_to_kb(self):
        assert format_bytes(5 * 1024**3) == "5.0G"
        assert format_bytes(300 * 1024**2) == "300M"

    def test_negative_clamped(self):
        assert format_bytes(-10) == "0K"
