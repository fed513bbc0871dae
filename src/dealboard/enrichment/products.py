"""F&I product mix derived from a deal's per-product profit fields."""

from dealboard.models.deal import Deal, ProductLine

# Fixed enumeration order: (key, display name, Deal attribute)
PRODUCT_CATALOG: tuple[tuple[str, str, str], ...] = (
    ("service-contract", "VSC/Extended Warranty", "service_contract_profit"),
    ("prepaid-maintenance", "Prepaid Maintenance", "prepaid_maintenance_profit"),
    ("gap-insurance", "GAP Insurance", "gap_insurance_profit"),
    ("tire-and-wheel", "Tire & Wheel", "tire_and_wheel_profit"),
    ("appearance-protection", "Paint Protection", "appearance_protection_profit"),
    ("other", "Other Products", "other_profit"),
)


def product_mix(deal: Deal) -> list[ProductLine]:
    """Products with profit > 0, in catalog order."""
    mix: list[ProductLine] = []
    for key, name, attr in PRODUCT_CATALOG:
        profit = getattr(deal, attr)
        if profit > 0:
            mix.append(ProductLine(key=key, name=name, profit=profit))
    return mix


def products_per_deal(deal: Deal) -> int:
    return len(product_mix(deal))
