import math
import unittest

from braiins_pool_bot.formatting import (
    format_btc_to_sats,
    format_date,
    format_decimal,
    format_gh_to_th,
    format_number,
    format_sats,
)


class FormatNumberTests(unittest.TestCase):
    def test_groups_thousands(self) -> None:
        self.assertEqual("180,000", format_number(180000))
        self.assertEqual("1,000,000", format_number(1_000_000))
        self.assertEqual("1,000", format_number(1000))

    def test_small_values_pass_through(self) -> None:
        self.assertEqual("0", format_number(0))
        self.assertEqual("999", format_number(999))

    def test_removing_commas_gives_back_the_number(self) -> None:
        for n in (0, 7, 12, 999, 1000, 1001, 65_536, 10**9 + 7, 2**63 - 1):
            self.assertEqual(str(n), format_number(n).replace(",", ""))

    def test_negative_is_clamped(self) -> None:
        self.assertEqual("0", format_number(-5))


class FormatDecimalTests(unittest.TestCase):
    def test_whole_numbers_have_no_fraction(self) -> None:
        self.assertEqual("1", format_decimal(1.0))
        self.assertEqual("0", format_decimal(0.0))
        self.assertEqual("250", format_decimal(250.0))

    def test_fractions_keep_shortest_digits(self) -> None:
        self.assertEqual("0.83", format_decimal(0.83))
        self.assertEqual("0.1", format_decimal(0.1))
        self.assertEqual("1.0234567891", format_decimal(1.0234567891))

    def test_no_exponent_notation(self) -> None:
        self.assertEqual("0.0000001", format_decimal(1e-7))
        self.assertEqual("10000000000000000", format_decimal(1e16))

    def test_non_finite(self) -> None:
        self.assertEqual("NaN", format_decimal(math.nan))
        self.assertEqual("inf", format_decimal(math.inf))


class FormatHashrateTests(unittest.TestCase):
    def test_gh_to_th(self) -> None:
        self.assertEqual("1 Th/s", format_gh_to_th(1000.0))
        self.assertEqual("1,000 Th/s", format_gh_to_th(1_000_000.0))
        self.assertEqual("5,820,970 Th/s", format_gh_to_th(5_820_970_883.3011))

    def test_truncates_below_one_th(self) -> None:
        self.assertEqual("0 Th/s", format_gh_to_th(999.9))

    def test_out_of_domain_values_do_not_raise(self) -> None:
        self.assertEqual("0 Th/s", format_gh_to_th(-1000.0))
        self.assertEqual("0 Th/s", format_gh_to_th(math.nan))
        self.assertEqual("9,223,372,036,854,775,807 Th/s", format_gh_to_th(math.inf))


class FormatSatoshiTests(unittest.TestCase):
    def test_format_sats(self) -> None:
        self.assertEqual("100 SAT", format_sats(100))
        self.assertEqual("1,000 SAT", format_sats(1000))
        self.assertEqual("1,000,000,000 SAT", format_sats(1_000_000_000))

    def test_btc_to_sats(self) -> None:
        self.assertEqual("1 SAT", format_btc_to_sats(0.00000001))
        self.assertEqual("1,000 SAT", format_btc_to_sats(0.00001))
        self.assertEqual("10,000 SAT", format_btc_to_sats(0.0001))
        self.assertEqual("100,000 SAT", format_btc_to_sats(0.001))
        self.assertEqual("1,000,000 SAT", format_btc_to_sats(0.01))
        self.assertEqual("100,000,000 SAT", format_btc_to_sats(1.0))
        self.assertEqual("1,000,000,000 SAT", format_btc_to_sats(10.0))

    def test_btc_to_sats_out_of_domain(self) -> None:
        self.assertEqual("0 SAT", format_btc_to_sats(-1.0))
        self.assertEqual("0 SAT", format_btc_to_sats(math.nan))


class FormatDateTests(unittest.TestCase):
    def test_format_date(self) -> None:
        self.assertEqual("2022-03-07", format_date(1646649012, "%Y-%m-%d"))

    def test_format_date_time_is_utc(self) -> None:
        self.assertEqual("2022-03-07 10:30:12", format_date(1646649012, "%Y-%m-%d %H:%M:%S"))

    def test_out_of_range_timestamps_are_clamped(self) -> None:
        self.assertEqual("1970-01-01", format_date(-10, "%Y-%m-%d"))
        self.assertEqual("9999-12-31", format_date(10**15, "%Y-%m-%d"))
        self.assertEqual("1970-01-01", format_date(math.nan, "%Y-%m-%d"))


if __name__ == "__main__":
    unittest.main()
