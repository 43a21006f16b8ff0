"""
Shipment enumerations and display lookup tables.

Statuses are plain constants: any status may follow any other, the tables
below only drive labels, badges, default event descriptions and emails.
"""

from decimal import Decimal, ROUND_HALF_UP
from django.db import models


class ShipmentStatus(models.TextChoices):
    """Shipment status enumeration."""
    # Normal flow
    CREATED = 'CREATED', 'Created'
    PICKUP_SCHEDULED = 'PICKUP_SCHEDULED', 'Pickup Scheduled'
    PICKED_UP = 'PICKED_UP', 'Picked Up'
    RECEIVED_AT_ORIGIN_HUB = 'RECEIVED_AT_ORIGIN_HUB', 'Received at Origin Hub'
    STORED = 'STORED', 'Stored'
    READY_FOR_DISPATCH = 'READY_FOR_DISPATCH', 'Ready for Dispatch'
    IN_TRANSIT = 'IN_TRANSIT', 'In Transit'
    ARRIVED_AT_DESTINATION_HUB = 'ARRIVED_AT_DESTINATION_HUB', 'Arrived at Destination Hub'
    OUT_FOR_DELIVERY = 'OUT_FOR_DELIVERY', 'Out for Delivery'
    DELIVERED = 'DELIVERED', 'Delivered'
    # Exceptions
    ON_HOLD = 'ON_HOLD', 'On Hold'
    DELIVERY_FAILED = 'DELIVERY_FAILED', 'Delivery Failed'
    RETURNED_TO_SENDER = 'RETURNED_TO_SENDER', 'Returned to Sender'
    CANCELLED = 'CANCELLED', 'Cancelled'
    DAMAGED = 'DAMAGED', 'Damaged'
    SEIZED = 'SEIZED', 'Seized'


class ServiceType(models.TextChoices):
    """Delivery speed tier."""
    ECONOMY = 'ECONOMY', 'Economy'
    STANDARD = 'STANDARD', 'Standard'
    EXPRESS = 'EXPRESS', 'Express'
    PRIORITY = 'PRIORITY', 'Priority'
    SAME_DAY = 'SAME_DAY', 'Same Day'
    NEXT_DAY = 'NEXT_DAY', 'Next Day'
    OVERNIGHT = 'OVERNIGHT', 'Overnight'


class ShipmentType(models.TextChoices):
    """Geographic scope."""
    DOMESTIC = 'DOMESTIC', 'Domestic'
    INTERNATIONAL = 'INTERNATIONAL', 'International'
    LOCAL = 'LOCAL', 'Local'
    IMPORT = 'IMPORT', 'Import'
    EXPORT = 'EXPORT', 'Export'


class ShipmentMode(models.TextChoices):
    """Transport method."""
    AIR = 'AIR', 'Air'
    SEA = 'SEA', 'Sea'
    ROAD = 'ROAD', 'Road'
    RAIL = 'RAIL', 'Rail'
    COURIER = 'COURIER', 'Courier'
    MULTIMODAL = 'MULTIMODAL', 'Multimodal'


class ConsignmentType(models.TextChoices):
    SHIPMENT = 'SHIPMENT', 'Shipment'
    CONSIGNMENT = 'CONSIGNMENT', 'Consignment'


class Currency(models.TextChoices):
    USD = 'USD', 'US Dollar'
    EUR = 'EUR', 'Euro'
    GBP = 'GBP', 'British Pound'
    CAD = 'CAD', 'Canadian Dollar'
    AUD = 'AUD', 'Australian Dollar'
    JPY = 'JPY', 'Japanese Yen'
    CNY = 'CNY', 'Chinese Yuan'
    INR = 'INR', 'Indian Rupee'
    NGN = 'NGN', 'Nigerian Naira'
    ZAR = 'ZAR', 'South African Rand'
    AED = 'AED', 'UAE Dirham'
    SGD = 'SGD', 'Singapore Dollar'
    CHF = 'CHF', 'Swiss Franc'
    BRL = 'BRL', 'Brazilian Real'
    MXN = 'MXN', 'Mexican Peso'


class PaymentMethod(models.TextChoices):
    CASH = 'CASH', 'Cash'
    BANK_TRANSFER = 'BANK_TRANSFER', 'Bank Transfer'
    CREDIT_CARD = 'CREDIT_CARD', 'Credit Card'
    DEBIT_CARD = 'DEBIT_CARD', 'Debit Card'
    PAYPAL = 'PAYPAL', 'PayPal'
    STRIPE = 'STRIPE', 'Stripe'
    CRYPTO = 'CRYPTO', 'Cryptocurrency'
    INVOICE = 'INVOICE', 'Invoice'
    COD = 'COD', 'Cash on Delivery'
    POD = 'POD', 'Payment on Delivery'
    PREPAID = 'PREPAID', 'Prepaid'


class PaymentStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    PAID = 'PAID', 'Paid'
    PARTIAL = 'PARTIAL', 'Partial'
    REFUNDED = 'REFUNDED', 'Refunded'
    FAILED = 'FAILED', 'Failed'


# ============================================
# STATUS LOOKUP TABLES
# ============================================

STATUS_DESCRIPTIONS = {
    ShipmentStatus.CREATED: "Shipment has been created and is being processed",
    ShipmentStatus.PICKUP_SCHEDULED: "Pickup has been scheduled with the carrier",
    ShipmentStatus.PICKED_UP: "Package has been picked up from sender",
    ShipmentStatus.RECEIVED_AT_ORIGIN_HUB: "Package received at origin sorting facility",
    ShipmentStatus.STORED: "Package is being stored at the facility",
    ShipmentStatus.READY_FOR_DISPATCH: "Package is ready to be dispatched",
    ShipmentStatus.IN_TRANSIT: "Package is in transit to destination",
    ShipmentStatus.ARRIVED_AT_DESTINATION_HUB: "Package arrived at destination facility",
    ShipmentStatus.OUT_FOR_DELIVERY: "Package is out for final delivery",
    ShipmentStatus.DELIVERED: "Package has been delivered successfully",
    ShipmentStatus.ON_HOLD: "Shipment is on hold due to an issue",
    ShipmentStatus.DELIVERY_FAILED: "Delivery attempt was unsuccessful",
    ShipmentStatus.RETURNED_TO_SENDER: "Package is being returned to sender",
    ShipmentStatus.CANCELLED: "Shipment has been cancelled",
    ShipmentStatus.DAMAGED: "Package was damaged during transit",
    ShipmentStatus.SEIZED: "Package has been seized by customs or authorities",
}

# Filled in when a tracking event is saved without a description
DEFAULT_EVENT_DESCRIPTIONS = {
    ShipmentStatus.CREATED: "Shipment has been created",
    ShipmentStatus.PICKUP_SCHEDULED: "Pickup has been scheduled",
    ShipmentStatus.PICKED_UP: "Package has been picked up",
    ShipmentStatus.RECEIVED_AT_ORIGIN_HUB: "Package received at origin hub",
    ShipmentStatus.STORED: "Package is stored in warehouse",
    ShipmentStatus.READY_FOR_DISPATCH: "Package is ready for dispatch",
    ShipmentStatus.IN_TRANSIT: "Package is in transit",
    ShipmentStatus.ARRIVED_AT_DESTINATION_HUB: "Package has arrived at destination hub",
    ShipmentStatus.OUT_FOR_DELIVERY: "Package is out for delivery",
    ShipmentStatus.DELIVERED: "Package has been delivered",
    ShipmentStatus.ON_HOLD: "Package is on hold",
    ShipmentStatus.DELIVERY_FAILED: "Delivery attempt failed",
    ShipmentStatus.RETURNED_TO_SENDER: "Package has been returned to sender",
    ShipmentStatus.CANCELLED: "Shipment has been cancelled",
    ShipmentStatus.DAMAGED: "Package has been reported as damaged",
    ShipmentStatus.SEIZED: "Package has been seized by customs or authorities",
}

# Dashboard badge classes
STATUS_BADGE_CLASSES = {
    ShipmentStatus.CREATED: "bg-gray-100 text-gray-800",
    ShipmentStatus.PICKUP_SCHEDULED: "bg-blue-100 text-blue-800",
    ShipmentStatus.PICKED_UP: "bg-blue-100 text-blue-800",
    ShipmentStatus.RECEIVED_AT_ORIGIN_HUB: "bg-indigo-100 text-indigo-800",
    ShipmentStatus.STORED: "bg-purple-100 text-purple-800",
    ShipmentStatus.READY_FOR_DISPATCH: "bg-cyan-100 text-cyan-800",
    ShipmentStatus.IN_TRANSIT: "bg-yellow-100 text-yellow-800",
    ShipmentStatus.ARRIVED_AT_DESTINATION_HUB: "bg-teal-100 text-teal-800",
    ShipmentStatus.OUT_FOR_DELIVERY: "bg-orange-100 text-orange-800",
    ShipmentStatus.DELIVERED: "bg-green-100 text-green-800",
    ShipmentStatus.ON_HOLD: "bg-amber-100 text-amber-800",
    ShipmentStatus.DELIVERY_FAILED: "bg-red-100 text-red-800",
    ShipmentStatus.RETURNED_TO_SENDER: "bg-pink-100 text-pink-800",
    ShipmentStatus.CANCELLED: "bg-gray-100 text-gray-800",
    ShipmentStatus.DAMAGED: "bg-red-100 text-red-800",
    ShipmentStatus.SEIZED: "bg-rose-100 text-rose-800",
}
DEFAULT_BADGE_CLASS = "bg-gray-100 text-gray-800"

# Status update emails
EMAIL_STATUS_COLORS = {
    ShipmentStatus.CREATED: '#6b7280',
    ShipmentStatus.PICKED_UP: '#3b82f6',
    ShipmentStatus.IN_TRANSIT: '#f59e0b',
    ShipmentStatus.OUT_FOR_DELIVERY: '#8b5cf6',
    ShipmentStatus.DELIVERED: '#10b981',
    ShipmentStatus.ON_HOLD: '#ef4444',
    ShipmentStatus.SEIZED: '#be123c',
}
DEFAULT_EMAIL_COLOR = '#6b7280'

EMAIL_STATUS_EMOJIS = {
    ShipmentStatus.CREATED: '📦',
    ShipmentStatus.PICKED_UP: '🚚',
    ShipmentStatus.IN_TRANSIT: '✈️',
    ShipmentStatus.OUT_FOR_DELIVERY: '🚛',
    ShipmentStatus.DELIVERED: '✅',
    ShipmentStatus.ON_HOLD: '⏸️',
    ShipmentStatus.SEIZED: '🚫',
}
DEFAULT_EMAIL_EMOJI = '📍'

CURRENCY_SYMBOLS = {
    Currency.USD: '$',
    Currency.EUR: '€',
    Currency.GBP: '£',
    Currency.CAD: 'C$',
    Currency.AUD: 'A$',
    Currency.JPY: '¥',
    Currency.CNY: '¥',
    Currency.INR: '₹',
    Currency.NGN: '₦',
    Currency.ZAR: 'R',
    Currency.AED: 'د.إ',
    Currency.SGD: 'S$',
    Currency.CHF: 'CHF',
    Currency.BRL: 'R$',
    Currency.MXN: 'MX$',
}


# ============================================
# HELPERS
# ============================================

def humanize_status(status: str) -> str:
    """IN_TRANSIT -> 'IN TRANSIT'."""
    return str(status).replace('_', ' ')


def get_status_label(status: str) -> str:
    if status in ShipmentStatus.values:
        return ShipmentStatus(status).label
    return humanize_status(status)


def get_status_description(status: str) -> str:
    return STATUS_DESCRIPTIONS.get(status, '')


def get_default_event_description(status: str) -> str:
    return DEFAULT_EVENT_DESCRIPTIONS.get(status, '')


def get_status_badge_class(status: str) -> str:
    return STATUS_BADGE_CLASSES.get(status, DEFAULT_BADGE_CLASS)


def get_email_status_color(status: str) -> str:
    return EMAIL_STATUS_COLORS.get(status, DEFAULT_EMAIL_COLOR)


def get_email_status_emoji(status: str) -> str:
    return EMAIL_STATUS_EMOJIS.get(status, DEFAULT_EMAIL_EMOJI)


def format_currency(amount, currency=Currency.USD) -> str:
    """
    Format an amount with its currency symbol, e.g. format_currency(12.5, 'EUR') -> '€12.50'.
    Unknown currencies fall back to the currency code as prefix.
    """
    symbol = CURRENCY_SYMBOLS.get(currency, str(currency))
    value = Decimal(str(amount)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    return f"{symbol}{value}"
