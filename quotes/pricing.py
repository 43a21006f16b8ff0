"""
Quote Estimator for Courier Express

Estimates shipping prices from package weight/dimensions and service tier.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Tuple

from django.utils import timezone

from shipments.constants import ServiceType

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')

# Per-kg base rates
BASE_RATES = {
    ServiceType.ECONOMY: Decimal('3.5'),
    ServiceType.STANDARD: Decimal('5.0'),
    ServiceType.EXPRESS: Decimal('12.0'),
    ServiceType.PRIORITY: Decimal('15.0'),
    ServiceType.SAME_DAY: Decimal('25.0'),
    ServiceType.NEXT_DAY: Decimal('18.0'),
    ServiceType.OVERNIGHT: Decimal('20.0'),
}

SERVICE_MULTIPLIERS = {
    ServiceType.ECONOMY: Decimal('0.8'),
    ServiceType.STANDARD: Decimal('1.0'),
    ServiceType.EXPRESS: Decimal('1.5'),
    ServiceType.PRIORITY: Decimal('1.8'),
    ServiceType.SAME_DAY: Decimal('2.5'),
    ServiceType.NEXT_DAY: Decimal('2.0'),
    ServiceType.OVERNIGHT: Decimal('2.2'),
}

MINIMUM_CHARGES = {
    ServiceType.ECONOMY: Decimal('10.0'),
    ServiceType.STANDARD: Decimal('15.0'),
    ServiceType.EXPRESS: Decimal('35.0'),
    ServiceType.PRIORITY: Decimal('45.0'),
    ServiceType.SAME_DAY: Decimal('75.0'),
    ServiceType.NEXT_DAY: Decimal('50.0'),
    ServiceType.OVERNIGHT: Decimal('60.0'),
}

# (min, max) business days
DELIVERY_DAYS = {
    ServiceType.SAME_DAY: (0, 1),
    ServiceType.NEXT_DAY: (1, 2),
    ServiceType.OVERNIGHT: (1, 2),
    ServiceType.EXPRESS: (1, 3),
    ServiceType.PRIORITY: (2, 4),
    ServiceType.STANDARD: (5, 10),
    ServiceType.ECONOMY: (10, 21),
}
DEFAULT_DELIVERY_DAYS = (5, 10)

DIM_WEIGHT_DIVISOR = Decimal('5000')  # cm³ -> kg
INSURANCE_RATE = Decimal('0.02')
HIGH_VALUE_THRESHOLD = Decimal('1000')
HIGH_VALUE_HANDLING_FEE = Decimal('25.0')


def _money(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass
class QuoteEstimate:
    """Result of a price estimation, all amounts rounded to cents."""
    base_charge: Decimal
    dimensional_weight: Decimal
    chargeable_weight: Decimal
    insurance_fee: Decimal
    handling_fee: Decimal
    total_estimate: Decimal
    breakdown: List[Dict] = field(default_factory=list)


class QuoteEstimator:
    """
    Price estimation for quote requests.

    Formula: base = Max(Minimum, ChargeableWeight * Rate * Multiplier)
             total = base + 2% insurance + high-value handling fee
    Chargeable weight is the higher of actual and dimensional weight.
    """

    def calculate_dimensional_weight(self, length, width, height) -> Decimal:
        """Dimensional weight = (L x W x H) / 5000, dimensions in cm."""
        return Decimal(str(length)) * Decimal(str(width)) * Decimal(str(height)) / DIM_WEIGHT_DIVISOR

    def get_chargeable_weight(self, weight, length, width, height) -> Decimal:
        return max(Decimal(str(weight)), self.calculate_dimensional_weight(length, width, height))

    def calculate_estimate(
        self,
        weight,
        dimensions: Tuple,
        service_type: str,
        value: Optional[Decimal] = None
    ) -> QuoteEstimate:
        """
        Calculate the estimated price of a shipment.

        Args:
            weight: Actual weight in kg
            dimensions: (length, width, height) in cm
            service_type: ServiceType value
            value: Declared value (insurance and handling are based on it)

        Returns:
            QuoteEstimate with a {label, amount} breakdown
        """
        length, width, height = dimensions
        dimensional_weight = self.calculate_dimensional_weight(length, width, height)
        chargeable_weight = max(Decimal(str(weight)), dimensional_weight)

        rate = BASE_RATES.get(service_type, BASE_RATES[ServiceType.STANDARD])
        multiplier = SERVICE_MULTIPLIERS.get(service_type, Decimal('1.0'))
        minimum = MINIMUM_CHARGES.get(service_type, MINIMUM_CHARGES[ServiceType.STANDARD])

        base_charge = max(chargeable_weight * rate * multiplier, minimum)

        declared_value = Decimal(str(value or 0))
        insurance_fee = declared_value * INSURANCE_RATE
        handling_fee = HIGH_VALUE_HANDLING_FEE if declared_value > HIGH_VALUE_THRESHOLD else Decimal('0')

        total = base_charge + insurance_fee + handling_fee

        breakdown = [
            {'label': 'Shipping charge', 'amount': _money(base_charge)},
            {'label': 'Insurance (2%)', 'amount': _money(insurance_fee)},
        ]
        if handling_fee > 0:
            breakdown.append({'label': 'High-value handling', 'amount': _money(handling_fee)})

        return QuoteEstimate(
            base_charge=_money(base_charge),
            dimensional_weight=_money(dimensional_weight),
            chargeable_weight=_money(chargeable_weight),
            insurance_fee=_money(insurance_fee),
            handling_fee=_money(handling_fee),
            total_estimate=_money(total),
            breakdown=breakdown,
        )

    def get_quick_estimate(self, weight, dimensions: Tuple, service_type: str) -> Decimal:
        """Shipping charge only, without insurance or handling."""
        return self.calculate_estimate(weight, dimensions, service_type).base_charge


def get_estimated_delivery_days(service_type: str) -> Dict[str, int]:
    """Delivery window in days, e.g. {'min': 5, 'max': 10} for STANDARD."""
    minimum, maximum = DELIVERY_DAYS.get(service_type, DEFAULT_DELIVERY_DAYS)
    return {'min': minimum, 'max': maximum}


def calculate_estimated_delivery_date(service_type: str):
    """Today (UTC) plus the maximum delivery days of the service."""
    return timezone.now().date() + timedelta(days=get_estimated_delivery_days(service_type)['max'])


# Singleton instance
quote_estimator = QuoteEstimator()
