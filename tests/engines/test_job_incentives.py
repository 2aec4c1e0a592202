"""
Tests for the job-level incentive resolver.

Covers:
- Referral commission to the single referrer
- Ceramic/graphene and polish detection by name or SKU
- Premium tier boundaries, including the 2000-2499 polish gap
- Premium split across the job's distinct assigned staff
- Unknown service ids are skipped
"""

from decimal import Decimal

import pytest

from detailing_engines import IncentiveRules
from detailing_engines.job_incentives import (
    PremiumKind,
    classify_premium,
    is_ceramic_service,
    is_polish_service,
    premium_bonus,
    resolve_job_incentives,
)
from detailing_kernel.domain.dtos import JobRecord, ServiceCatalogEntry

CERAMIC = ServiceCatalogEntry(id="SV-CER", name="Ceramic Coating 9H", sku="CER-9H", category="COATING")
GRAPHENE_SKU = ServiceCatalogEntry(id="SV-GRA", name="Top Coat Pro", sku="GRAPHENE-X", category="COATING")
POLISH = ServiceCatalogEntry(id="SV-POL", name="Machine Polish", sku="MP-01", category="DETAILING")
POL_SKU = ServiceCatalogEntry(id="SV-CUT", name="Paint Correction", sku="POL-CUT-2", category="DETAILING")
WASH = ServiceCatalogEntry(id="SV-WASH", name="Foam Wash", sku="WSH-01", category="WASHING")

CATALOG = [CERAMIC, GRAPHENE_SKU, POLISH, POL_SKU, WASH]


def _job(job_id, total, services=(), staff=(), referrer=None):
    return JobRecord(
        id=job_id,
        date="2024-06-03",
        time_in="11:00",
        vehicle_class="SUV",
        total=Decimal(total),
        service_ids=tuple(services),
        assigned_staff_ids=tuple(staff),
        referred_by_staff_id=referrer,
    )


class TestReferralCommission:

    def test_full_ten_percent_to_referrer(self):
        jobs = [_job("J1", "5000", services=["SV-WASH"], staff=["A", "B"], referrer="R")]

        result = resolve_job_incentives(jobs=jobs, services=CATALOG)

        assert result.referral == {"R": Decimal("500")}

    def test_referrals_accumulate(self):
        jobs = [
            _job("J1", "1000", referrer="R"),
            _job("J2", "2500", referrer="R"),
            _job("J3", "800", referrer="S"),
        ]
        result = resolve_job_incentives(jobs=jobs, services=CATALOG)
        assert result.referral == {"R": Decimal("350"), "S": Decimal("80")}

    def test_no_referrer(self):
        result = resolve_job_incentives(jobs=[_job("J1", "1000")], services=CATALOG)
        assert result.referral == {}
        assert result.jobs[0].referrer_id is None
        assert result.jobs[0].referral_amount == Decimal("0")


class TestPremiumDetection:

    def test_ceramic_by_name(self):
        assert classify_premium([CERAMIC]) is PremiumKind.CERAMIC

    def test_graphene_by_sku(self):
        assert classify_premium([GRAPHENE_SKU]) is PremiumKind.CERAMIC

    def test_polish_by_name(self):
        assert classify_premium([POLISH]) is PremiumKind.POLISH

    def test_polish_by_sku_marker(self):
        assert classify_premium([POL_SKU]) is PremiumKind.POLISH

    def test_sku_marker_is_case_sensitive(self):
        svc = ServiceCatalogEntry(id="X", name="Interior Clean", sku="pol-x", category="DETAILING")
        assert classify_premium([svc]) is PremiumKind.NONE

    def test_ceramic_wins_over_polish(self):
        assert classify_premium([POLISH, CERAMIC]) is PremiumKind.CERAMIC

    def test_plain_service(self):
        assert classify_premium([WASH]) is PremiumKind.NONE
        assert classify_premium([]) is PremiumKind.NONE

    def test_mixed_case_keywords_match(self):
        rules = IncentiveRules(polish_keyword="Polish", ceramic_keywords=("Graphene",))
        assert is_polish_service(POLISH, rules)
        assert is_ceramic_service(GRAPHENE_SKU, rules)


class TestPremiumTiers:

    @pytest.mark.parametrize(
        "total, expected",
        [
            ("30000", "6000"),
            ("45000", "6000"),
            ("29999", "4000"),
            ("500", "4000"),
        ],
    )
    def test_ceramic_tiers(self, total, expected):
        assert premium_bonus(PremiumKind.CERAMIC, Decimal(total)) == Decimal(expected)

    @pytest.mark.parametrize(
        "total, expected",
        [
            ("6000", "600"),
            ("5999", "400"),
            ("2500", "400"),
            ("2499", "200"),
            ("2000", "200"),
            ("1999", "200"),
        ],
    )
    def test_polish_tiers(self, total, expected):
        assert premium_bonus(PremiumKind.POLISH, Decimal(total)) == Decimal(expected)

    @pytest.mark.parametrize(
        "kind, expected",
        [(PremiumKind.CERAMIC, "4000"), (PremiumKind.POLISH, "200")],
    )
    def test_lowest_tier_covers_negative_totals(self, kind, expected):
        assert premium_bonus(kind, Decimal("-1")) == Decimal(expected)

    def test_no_premium(self):
        assert premium_bonus(PremiumKind.NONE, Decimal("99999")) == Decimal("0")


class TestPremiumDistribution:

    def test_ceramic_at_boundary_split_across_crew(self):
        jobs = [_job("J1", "30000", services=["SV-CER"], staff=["A", "B"])]

        result = resolve_job_incentives(jobs=jobs, services=CATALOG)

        assert result.premium == {"A": Decimal("3000"), "B": Decimal("3000")}
        assert result.jobs[0].premium_kind is PremiumKind.CERAMIC
        assert result.jobs[0].premium_bonus == Decimal("6000")

    def test_duplicate_assignment_counts_once(self):
        jobs = [_job("J1", "29999", services=["SV-CER"], staff=["A", "A", "B"])]
        result = resolve_job_incentives(jobs=jobs, services=CATALOG)
        assert result.premium == {"A": Decimal("2000"), "B": Decimal("2000")}

    def test_polish_single_staff(self):
        jobs = [_job("J1", "2500", services=["SV-POL"], staff=["A"])]
        result = resolve_job_incentives(jobs=jobs, services=CATALOG)
        assert result.premium == {"A": Decimal("400")}

    def test_no_staff_no_distribution(self):
        jobs = [_job("J1", "30000", services=["SV-CER"])]
        result = resolve_job_incentives(jobs=jobs, services=CATALOG)
        assert result.premium == {}
        assert result.jobs[0].premium_bonus == Decimal("6000")
        assert result.jobs[0].premium_staff == ()

    def test_unknown_service_ids_are_skipped(self):
        jobs = [_job("J1", "30000", services=["MISSING", "SV-WASH"], staff=["A"])]
        result = resolve_job_incentives(jobs=jobs, services=CATALOG)
        assert result.premium == {}
        assert result.jobs[0].premium_kind is PremiumKind.NONE

    def test_premiums_accumulate_across_jobs(self):
        jobs = [
            _job("J1", "1999", services=["SV-POL"], staff=["A"]),
            _job("J2", "6000", services=["SV-CUT"], staff=["A", "B"]),
        ]
        result = resolve_job_incentives(jobs=jobs, services=CATALOG)
        assert result.premium == {"A": Decimal("500"), "B": Decimal("300")}
