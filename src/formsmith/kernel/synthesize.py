"""Config synthesis: infer UI type, validation and output transform per field."""

import re
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .consolidate import ConsolidatedRow

# Field types
CURRENCY = "currency-input"
DATE = "date"
EMAIL = "email"
TELEPHONE = "tel"
SINGLE_SELECT = "customSelect"
NUMBER = "number"
PERCENTAGE = "percentage"
TEXT = "text"

# Checked in order; the first matching fragment decides the type.
TYPE_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("currency", "amount", "premium"), CURRENCY),
    (("date",), DATE),
    (("email",), EMAIL),
    (("phone", "tel"), TELEPHONE),
    (("dropdown", "select"), SINGLE_SELECT),
    (("number", "count", "age"), NUMBER),
    (("percent",), PERCENTAGE),
)

BALANCE_TOKEN = "Balance"

PLAIN_VALUE = "plain_value"
ARRAY_ITEM = "amount_object"
ARRAY_ITEM_PROPERTY = "empValue"

ARRAY_ITEM_TYPES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("deductible",), "DEDUCTIBLE"),
    (("copay",), "COPAY"),
    (("coinsurance",), "COINSURANCE"),
    (("oop", "out of pocket", "out-of-pocket"), "OOP_MAX"),
)

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9\s]")


class ValidationRule(BaseModel):
    type: str
    value: Optional[Any] = None
    message: Optional[str] = None


class UIConfig(BaseModel):
    label: str
    placeholder: str
    order: int


class OutputTransform(BaseModel):
    """Where and how a field's value is written on output."""
    enabled: bool = True
    output_field_path: str
    transformation_type: str = PLAIN_VALUE
    array_item_property: Optional[str] = None
    array_item_type: Optional[str] = None
    create_array_item: Optional[bool] = None


class FieldSpec(BaseModel):
    name: str
    type: str
    ui_config: UIConfig
    validation_rules: List[ValidationRule] = Field(default_factory=list)
    options: List[Any] = Field(default_factory=list)
    output_transform: OutputTransform


class ScreenContext(BaseModel):
    """One place a field appears: screen, section and subsection."""
    screen: str
    section: str
    sub_section: Optional[str] = None
    order: int
    disabled: bool = False

    @classmethod
    def from_row(cls, row: ConsolidatedRow) -> "ScreenContext":
        return cls(
            screen=row.screen_name,
            section=row.section,
            sub_section=row.subsection or None,
            order=row.order,
        )

    def key(self) -> Tuple[str, str, str]:
        return (self.screen, self.section, self.sub_section or "")


class ConfigRecord(BaseModel):
    """Form configuration for one (field name, plan type) pair."""
    type: str
    sub_type: str = Field("field", serialization_alias="subType")
    module: str = "CPQ"
    field: FieldSpec
    screen_contexts: List[ScreenContext] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    def add_context(self, context: ScreenContext) -> bool:
        """Append `context` unless the same screen/section/subsection is already listed."""
        if any(existing.key() == context.key() for existing in self.screen_contexts):
            return False
        self.screen_contexts.append(context)
        return True

    def to_document(self) -> Dict[str, Any]:
        """Serialize with wire names, omitting unset optional keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _first_fragment_match(text: str, table: Tuple[Tuple[Tuple[str, ...], str], ...]) -> Optional[str]:
    lowered = text.lower()
    for fragments, value in table:
        if any(fragment in lowered for fragment in fragments):
            return value
    return None


def infer_type(field_name: str, db_column: str = "") -> str:
    """Infer a UI field type from the field name.

    Name fragments are checked in a fixed priority order. When the name says
    nothing and the DB column names a balance, the field is a currency amount.
    """
    field_type = _first_fragment_match(field_name, TYPE_RULES)
    if field_type:
        return field_type
    if BALANCE_TOKEN in db_column:
        return CURRENCY
    return TEXT


def infer_validation_rules(field_name: str, field_type: str, required: bool = True) -> List[ValidationRule]:
    rules: List[ValidationRule] = []
    if required:
        rules.append(ValidationRule(type="required", message=f"{field_name} is required"))
    if field_type == EMAIL:
        rules.append(ValidationRule(type="email", message="Please enter a valid email address"))
    if field_type in (NUMBER, CURRENCY):
        rules.append(ValidationRule(type="min", value=0, message="Value cannot be negative"))
    return rules


def infer_output_transform(db_column: str, field_type: str, field_name: str) -> OutputTransform:
    """Map a field to its output path.

    Currency fields stored in a *Balance column become tagged array items;
    everything else is a plain value at `db_column`.
    """
    if field_type == CURRENCY and BALANCE_TOKEN in db_column:
        return OutputTransform(
            output_field_path=db_column,
            transformation_type=ARRAY_ITEM,
            array_item_property=ARRAY_ITEM_PROPERTY,
            array_item_type=_first_fragment_match(field_name, ARRAY_ITEM_TYPES) or "",
            create_array_item=True,
        )
    return OutputTransform(output_field_path=db_column)


def to_identifier(field_name: str) -> str:
    """'Monthly Premium Amount' -> 'monthlyPremiumAmount'."""
    words = _NON_ALNUM.sub("", field_name).split()
    return "".join(
        word.lower() if index == 0 else word[:1].upper() + word[1:].lower()
        for index, word in enumerate(words)
    )


def synthesize(row: ConsolidatedRow) -> ConfigRecord:
    field_type = infer_type(row.field_name, row.db_mapping)
    return ConfigRecord(
        type=row.plan_type.upper(),
        field=FieldSpec(
            name=to_identifier(row.field_name),
            type=field_type,
            ui_config=UIConfig(
                label=row.field_name,
                placeholder="0.00" if field_type == CURRENCY else row.field_name,
                order=row.order,
            ),
            validation_rules=infer_validation_rules(row.field_name, field_type),
            output_transform=infer_output_transform(row.db_mapping, field_type, row.field_name),
        ),
        screen_contexts=[ScreenContext.from_row(row)],
    )


def synthesize_all(rows: Iterable[ConsolidatedRow]) -> List[ConfigRecord]:
    """Build one ConfigRecord per (field name, plan type), in first-seen order.

    Repeat sightings of a key add a screen context to the existing record.
    """
    records: "OrderedDict[Tuple[str, str], ConfigRecord]" = OrderedDict()
    for row in rows:
        key = (row.field_name, row.plan_type)
        record = records.get(key)
        if record is None:
            records[key] = synthesize(row)
        else:
            record.add_context(ScreenContext.from_row(row))
    return list(records.values())
