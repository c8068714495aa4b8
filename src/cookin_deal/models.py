"""Data models for deal inputs and valuation results."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar


class FinancingType(str, Enum):
    """How the acquisition is financed."""

    HARD_MONEY = "hard-money"
    PRIVATE_MONEY = "private-money"
    CONVENTIONAL = "conventional"
    CASH = "cash"
    BRIDGE = "bridge"
    DSCR = "dscr"
    HELOC = "heloc"
    SELLER_FINANCE = "seller-finance"


class DrawSchedule(str, Enum):
    """Rehab draw schedule. Informational only, never affects totals."""

    MONTHLY = "monthly"
    MILESTONE = "milestone"
    UPFRONT = "upfront"


class Signal(str, Enum):
    """Qualitative deal recommendation derived from ROI."""

    STRONG_BUY = "STRONG BUY"
    BUY = "BUY"
    CONSIDER = "CONSIDER"
    RENEGOTIATE = "RENEGOTIATE"
    PASS = "PASS"

    @property
    def rank(self) -> int:
        """Position on the PASS < ... < STRONG BUY scale."""
        return _SIGNAL_RANKS[self]


_SIGNAL_RANKS = {
    Signal.PASS: 0,
    Signal.RENEGOTIATE: 1,
    Signal.CONSIDER: 2,
    Signal.BUY: 3,
    Signal.STRONG_BUY: 4,
}


class Grade(str, Enum):
    """Letter grade derived from ROI (separate scale from Signal)."""

    A = "A"
    B_PLUS = "B+"
    B_MINUS = "B-"
    C = "C"
    D = "D"
    F = "F"


def _section_to_dict(section: Any) -> dict[str, Any]:
    """Serialize a section dataclass using its camelCase key map."""
    out: dict[str, Any] = {}
    for f in fields(section):
        value = getattr(section, f.name)
        if isinstance(value, Enum):
            value = value.value
        out[section.KEYS[f.name]] = value
    return out


def _section_from_dict(cls: type, data: dict[str, Any] | None) -> Any:
    """Build a section dataclass from a camelCase dict; missing keys keep defaults."""
    data = data or {}
    kwargs = {}
    for f in fields(cls):
        key = cls.KEYS[f.name]
        if key in data:
            kwargs[f.name] = data[key]
    return cls(**kwargs)


@dataclass(frozen=True)
class PropertyInfo:
    """Property attributes. Display only, except sqft for per-sqft ratios."""

    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    property_type: str = "single-family"
    bedrooms: int = 3
    bathrooms: float = 2
    sqft: float = 1500
    year_built: int = 1990
    lot_size: float = 0.25

    KEYS: ClassVar[dict[str, str]] = {
        "address": "address",
        "city": "city",
        "state": "state",
        "zip": "zip",
        "property_type": "propertyType",
        "bedrooms": "bedrooms",
        "bathrooms": "bathrooms",
        "sqft": "sqft",
        "year_built": "yearBuilt",
        "lot_size": "lotSize",
    }

    @property
    def full_address(self) -> str:
        """Single-line address, e.g. ``123 Main St, Austin, TX 78701``."""
        tail = " ".join(p for p in (self.state, self.zip) if p)
        parts = [p for p in (self.address, self.city, tail) if p]
        return ", ".join(parts)


@dataclass(frozen=True)
class Pricing:
    """Acquisition and exit values (whole dollars)."""

    asking_price: float = 0
    arv: float = 0
    purchase_price: float = 0

    KEYS: ClassVar[dict[str, str]] = {
        "asking_price": "askingPrice",
        "arv": "arv",
        "purchase_price": "purchasePrice",
    }


@dataclass(frozen=True)
class RehabCategories:
    """Fixed rehab cost buckets."""

    demolition: float = 0
    foundation: float = 0
    roofing: float = 0
    siding: float = 0
    windows: float = 0
    doors: float = 0
    garage: float = 0
    electrical: float = 0
    plumbing: float = 0
    hvac: float = 0
    insulation: float = 0
    drywall: float = 0
    painting: float = 0
    flooring: float = 0
    kitchen_cabinets: float = 0
    kitchen_countertops: float = 0
    kitchen_appliances: float = 0
    kitchen_fixtures: float = 0
    bathroom_vanities: float = 0
    bathroom_tile_shower: float = 0
    bathroom_fixtures: float = 0
    bathroom_toilets: float = 0
    interior: float = 0
    landscaping: float = 0
    concrete: float = 0
    decks_patios: float = 0
    fencing: float = 0
    permits: float = 0
    dumpsters: float = 0
    cleaning: float = 0
    staging: float = 0
    general_contractor: float = 0
    contingency: float = 0
    miscellaneous: float = 0

    KEYS: ClassVar[dict[str, str]] = {
        "demolition": "demolition",
        "foundation": "foundation",
        "roofing": "roofing",
        "siding": "siding",
        "windows": "windows",
        "doors": "doors",
        "garage": "garage",
        "electrical": "electrical",
        "plumbing": "plumbing",
        "hvac": "hvac",
        "insulation": "insulation",
        "drywall": "drywall",
        "painting": "painting",
        "flooring": "flooring",
        "kitchen_cabinets": "kitchenCabinets",
        "kitchen_countertops": "kitchenCountertops",
        "kitchen_appliances": "kitchenAppliances",
        "kitchen_fixtures": "kitchenFixtures",
        "bathroom_vanities": "bathroomVanities",
        "bathroom_tile_shower": "bathroomTileShower",
        "bathroom_fixtures": "bathroomFixtures",
        "bathroom_toilets": "bathroomToilets",
        "interior": "interior",
        "landscaping": "landscaping",
        "concrete": "concrete",
        "decks_patios": "decksPatios",
        "fencing": "fencing",
        "permits": "permits",
        "dumpsters": "dumpsters",
        "cleaning": "cleaning",
        "staging": "staging",
        "general_contractor": "generalContractor",
        "contingency": "contingency",
        "miscellaneous": "miscellaneous",
    }

    # Worksheet labels, in display order
    LABELS: ClassVar[dict[str, str]] = {
        "demolition": "Demolition",
        "foundation": "Foundation",
        "roofing": "Roofing",
        "siding": "Siding",
        "windows": "Windows",
        "doors": "Doors",
        "garage": "Garage",
        "electrical": "Electrical",
        "plumbing": "Plumbing",
        "hvac": "HVAC",
        "insulation": "Insulation",
        "drywall": "Drywall",
        "painting": "Painting",
        "flooring": "Flooring",
        "kitchen_cabinets": "Kitchen Cabinets",
        "kitchen_countertops": "Kitchen Countertops",
        "kitchen_appliances": "Kitchen Appliances",
        "kitchen_fixtures": "Kitchen Fixtures",
        "bathroom_vanities": "Bathroom Vanities",
        "bathroom_tile_shower": "Bathroom Tile/Shower",
        "bathroom_fixtures": "Bathroom Fixtures",
        "bathroom_toilets": "Bathroom Toilets",
        "interior": "Interior",
        "landscaping": "Landscaping",
        "concrete": "Concrete",
        "decks_patios": "Decks/Patios",
        "fencing": "Fencing",
        "permits": "Permits",
        "dumpsters": "Dumpsters",
        "cleaning": "Cleaning",
        "staging": "Staging",
        "general_contractor": "General Contractor",
        "contingency": "Contingency",
        "miscellaneous": "Miscellaneous",
    }

    def items(self) -> list[tuple[str, float]]:
        """(field name, amount) pairs in declaration order."""
        return [(f.name, getattr(self, f.name)) for f in fields(self)]


@dataclass(frozen=True)
class CustomRehabItem:
    """User-defined rehab line item."""

    id: str
    name: str
    cost: float = 0
    notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "cost": self.cost, "notes": self.notes}


@dataclass(frozen=True)
class Financing:
    """Loan structure."""

    financing_type: FinancingType = FinancingType.HARD_MONEY
    loan_amount: float = 0
    interest_rate: float = 12
    loan_term_months: int = 12
    loan_points: float = 2
    rehab_financed: bool = False
    rehab_loan_amount: float = 0
    draw_schedule: DrawSchedule = DrawSchedule.MONTHLY

    KEYS: ClassVar[dict[str, str]] = {
        "financing_type": "financingType",
        "loan_amount": "loanAmount",
        "interest_rate": "interestRate",
        "loan_term_months": "loanTermMonths",
        "loan_points": "loanPoints",
        "rehab_financed": "rehabFinanced",
        "rehab_loan_amount": "rehabLoanAmount",
        "draw_schedule": "drawSchedule",
    }


@dataclass(frozen=True)
class HoldingCosts:
    """Monthly carrying costs and the holding period."""

    monthly_taxes: float = 0
    monthly_insurance: float = 0
    monthly_utilities: float = 200
    monthly_hoa: float = 0
    lawn_care: float = 0
    security: float = 0
    property_management: float = 0
    holding_period_months: int = 6

    KEYS: ClassVar[dict[str, str]] = {
        "monthly_taxes": "monthlyTaxes",
        "monthly_insurance": "monthlyInsurance",
        "monthly_utilities": "monthlyUtilities",
        "monthly_hoa": "monthlyHOA",
        "lawn_care": "lawnCare",
        "security": "security",
        "property_management": "propertyManagement",
        "holding_period_months": "holdingPeriodMonths",
    }


@dataclass(frozen=True)
class BuyingCosts:
    """Acquisition transaction costs."""

    closing_costs: float = 0
    inspection: float = 500
    appraisal: float = 500
    title_insurance: float = 0
    survey_fee: float = 0
    attorney_fees: float = 0
    recording_fees: float = 0
    escrow_fees: float = 0
    other: float = 0

    KEYS: ClassVar[dict[str, str]] = {
        "closing_costs": "closingCostsBuying",
        "inspection": "inspectionCosts",
        "appraisal": "appraisalCosts",
        "title_insurance": "titleInsuranceBuying",
        "survey_fee": "surveyFee",
        "attorney_fees": "attorneyFees",
        "recording_fees": "recordingFees",
        "escrow_fees": "escrowFees",
        "other": "otherBuyingCosts",
    }


@dataclass(frozen=True)
class SellingCosts:
    """Exit transaction costs. Commission is a percent of ARV."""

    agent_commission_percent: float = 6
    closing_costs: float = 0
    title_insurance: float = 0
    transfer_taxes: float = 0
    home_warranty: float = 0
    concessions: float = 0
    staging_cost: float = 0
    photography_marketing: float = 0
    other: float = 0

    KEYS: ClassVar[dict[str, str]] = {
        "agent_commission_percent": "agentCommissionPercent",
        "closing_costs": "closingCostsSelling",
        "title_insurance": "titleInsuranceSelling",
        "transfer_taxes": "transferTaxes",
        "home_warranty": "homeWarranty",
        "concessions": "concessions",
        "staging_cost": "stagingCost",
        "photography_marketing": "photographyMarketing",
        "other": "otherSellingCosts",
    }


@dataclass(frozen=True)
class DealInput:
    """Fully-populated deal record handed to the valuation engine.

    Serialized with the form's flat camelCase keys (``purchasePrice``,
    ``rehabCategories``, ``customRehabItems``...). Only raw inputs are
    ever serialized; derived values live in :class:`Calculations`.
    """

    property_info: PropertyInfo = field(default_factory=PropertyInfo)
    pricing: Pricing = field(default_factory=Pricing)
    rehab: RehabCategories = field(default_factory=RehabCategories)
    custom_rehab_items: tuple[CustomRehabItem, ...] = ()
    financing: Financing = field(default_factory=Financing)
    holding: HoldingCosts = field(default_factory=HoldingCosts)
    buying: BuyingCosts = field(default_factory=BuyingCosts)
    selling: SellingCosts = field(default_factory=SellingCosts)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        data.update(_section_to_dict(self.property_info))
        data.update(_section_to_dict(self.pricing))
        data["rehabCategories"] = _section_to_dict(self.rehab)
        data["customRehabItems"] = [item.to_dict() for item in self.custom_rehab_items]
        data.update(_section_to_dict(self.financing))
        data.update(_section_to_dict(self.holding))
        data.update(_section_to_dict(self.buying))
        data.update(_section_to_dict(self.selling))
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DealInput:
        """Rebuild from :meth:`to_dict` output. Values are taken as-is.

        Use :func:`cookin_deal.builder.build_deal_input` for raw form values.
        """
        financing = _section_from_dict(Financing, data)
        financing = replace(
            financing,
            financing_type=FinancingType(financing.financing_type),
            draw_schedule=DrawSchedule(financing.draw_schedule),
        )
        items = tuple(
            CustomRehabItem(
                id=str(i.get("id", "")),
                name=str(i.get("name", "")),
                cost=i.get("cost", 0),
                notes=str(i.get("notes", "") or ""),
            )
            for i in data.get("customRehabItems") or []
        )
        return cls(
            property_info=_section_from_dict(PropertyInfo, data),
            pricing=_section_from_dict(Pricing, data),
            rehab=_section_from_dict(RehabCategories, data.get("rehabCategories")),
            custom_rehab_items=items,
            financing=financing,
            holding=_section_from_dict(HoldingCosts, data),
            buying=_section_from_dict(BuyingCosts, data),
            selling=_section_from_dict(SellingCosts, data),
        )


@dataclass(frozen=True)
class Calculations:
    """Derived deal metrics. Always recomputable from a DealInput."""

    total_rehab_cost: float
    points_cost: float
    total_interest: float
    monthly_holding: float
    total_holding_costs: float
    total_buying_costs: float
    agent_commission: float
    total_selling_costs: float
    total_investment: float
    total_profit: float
    roi: float
    percent_of_arv: float
    max_allowable_offer: float
    equity_at_purchase: float
    cash_needed: float
    arv_per_sqft: float
    cost_per_sqft: float
    profit_per_sqft: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalRehabCost": self.total_rehab_cost,
            "pointsCost": self.points_cost,
            "totalInterest": self.total_interest,
            "monthlyHolding": self.monthly_holding,
            "totalHoldingCosts": self.total_holding_costs,
            "totalBuyingCosts": self.total_buying_costs,
            "agentCommission": self.agent_commission,
            "totalSellingCosts": self.total_selling_costs,
            "totalInvestment": self.total_investment,
            "totalProfit": self.total_profit,
            "roi": self.roi,
            "percentOfArv": self.percent_of_arv,
            "maxAllowableOffer": self.max_allowable_offer,
            "equityAtPurchase": self.equity_at_purchase,
            "cashNeeded": self.cash_needed,
            "arvPerSqft": self.arv_per_sqft,
            "costPerSqft": self.cost_per_sqft,
            "profitPerSqft": self.profit_per_sqft,
        }


@dataclass
class SavedDeal:
    """A persisted deal: raw input plus bookkeeping, never derived values."""

    owner_key: str
    deal_id: str
    name: str
    deal: DealInput
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner_key": self.owner_key,
            "deal_id": self.deal_id,
            "name": self.name,
            "deal": self.deal.to_dict(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class DealAnalysis:
    """A deal with its calculations and classifications."""

    deal: DealInput
    calculations: Calculations
    signal: Signal
    grade: Grade
    # Display-only payment figure; never feeds totals
    monthly_payment: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "deal": self.deal.to_dict(),
            "calculations": self.calculations.to_dict(),
            "signal": self.signal.value,
            "grade": self.grade.value,
            "monthly_payment": self.monthly_payment,
        }
