"""Canonical data models for GST invoice extraction."""
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator
from pydantic.alias_generators import to_camel

# Gemini is asked for numbers but may answer with strings ("18%", "1,200.00");
# values are kept as returned and whole floats are written like JSON integers.
Amount = Union[int, float, str]


class WireModel(BaseModel):
    """Base for models exchanged with the extraction service in camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def drop_null_fields(cls, data: Any) -> Any:
        """Treat explicit nulls as missing so field defaults apply."""
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @field_serializer("*", mode="wrap")
    def plain_whole_numbers(self, value: Any, handler) -> Any:
        """Render whole floats without a trailing ".0", e.g. 1200.00 as 1200."""
        result = handler(value)
        if isinstance(result, float) and result.is_integer():
            return int(result)
        return result


class InvoiceSummary(WireModel):
    """One invoice found in a document."""
    gstin: str = Field(default="", description="Customer's GSTIN, empty if not printed")
    customer_name: str = Field(default="", description="Name of the customer")
    invoice_number: str = Field(default="", description="Unique invoice number")
    invoice_date: str = Field(default="", description="Invoice date (YYYY-MM-DD)")
    invoice_value: Optional[Amount] = Field(None, description="Total value of the invoice")
    gst_rate: str = Field(default="", description="Primary GST rate or comma-separated rates")
    taxable_value: Optional[Amount] = Field(None, description="Total taxable value")
    igst: Optional[Amount] = Field(None, description="Total IGST amount")
    cgst: Optional[Amount] = Field(None, description="Total CGST amount")
    sgst: Optional[Amount] = Field(None, description="Total SGST amount")
    cess: Optional[Amount] = Field(None, description="Total CESS amount")


class InvoiceItem(WireModel):
    """One line item, tied to its parent invoice by number."""
    invoice_number: str = Field(default="", description="Invoice number this item belongs to")
    gst_rate: str = Field(default="", description="GST rate for the line item")
    hsn_code: str = Field(default="", description="HSN code for the product/service")
    quantity: Optional[Amount] = Field(None, description="Quantity of the item")
    taxable_value: Optional[Amount] = Field(None, description="Taxable value of the line item")
    igst: Optional[Amount] = Field(None, description="IGST amount for the line item")
    cgst: Optional[Amount] = Field(None, description="CGST amount for the line item")
    sgst: Optional[Amount] = Field(None, description="SGST amount for the line item")


class ExtractedData(WireModel):
    """Structured result for one document, or the merged result for a batch.

    Both collections are required in a service response; empty lists are valid.
    """
    invoice_summary: List[InvoiceSummary]
    invoice_items: List[InvoiceItem]

    @classmethod
    def empty(cls) -> "ExtractedData":
        return cls(invoice_summary=[], invoice_items=[])

    @property
    def is_empty(self) -> bool:
        return not self.invoice_summary and not self.invoice_items


class UploadedDocument(BaseModel):
    """A file selected for analysis: its name, MIME type and raw bytes."""
    name: str = Field(..., description="Original file name")
    mime_type: str = Field(default="", description="MIME type declared by the uploader")
    data: bytes = Field(..., repr=False, description="File content")

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class Column(BaseModel):
    """A display column: the record field alias and its header label."""
    key: str
    label: str


SUMMARY_COLUMNS: List[Column] = [
    Column(key="gstin", label="GSTIN"),
    Column(key="customerName", label="Customer Name"),
    Column(key="invoiceNumber", label="Invoice No."),
    Column(key="invoiceDate", label="Invoice Date"),
    Column(key="invoiceValue", label="Invoice Value"),
    Column(key="taxableValue", label="Taxable Value"),
    Column(key="gstRate", label="GST Rate"),
    Column(key="igst", label="IGST"),
    Column(key="cgst", label="CGST"),
    Column(key="sgst", label="SGST"),
    Column(key="cess", label="CESS"),
]

ITEM_COLUMNS: List[Column] = [
    Column(key="invoiceNumber", label="Invoice No."),
    Column(key="hsnCode", label="HSN Code"),
    Column(key="gstRate", label="GST Rate"),
    Column(key="quantity", label="Quantity"),
    Column(key="taxableValue", label="Taxable Value"),
    Column(key="igst", label="IGST"),
    Column(key="cgst", label="CGST"),
    Column(key="sgst", label="SGST"),
]
