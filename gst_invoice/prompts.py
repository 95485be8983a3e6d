"""
Prompts module for GST invoice extraction.
Contains the extraction instruction and the response schema for the Gemini API.
"""

from google.genai import types

EXTRACTION_INSTRUCTION = """You are an expert invoice data extraction tool for Indian GST invoices. Analyze the provided document (which could be a PDF, DOC, or CSV). Your task is to extract all invoice details and format them into a JSON object.

The JSON object must contain two keys: 'invoiceSummary' and 'invoiceItems'.

For 'invoiceSummary', create an array of objects, where each object represents a single invoice found in the document. For each invoice, extract the following fields:
- 'gstin': It is crucial that you extract the CUSTOMER's GST Identification Number. Invoices often have two GSTINs (supplier and customer/buyer). You must identify and provide only the customer's. If the customer's GSTIN is not present on the invoice, leave this field as an empty string.
- 'customerName'
- 'invoiceNumber'
- 'invoiceDate'
- 'invoiceValue'
- 'gstRate'
- 'taxableValue'
- 'igst'
- 'cgst'
- 'sgst'
- 'cess'
If a value for any field other than 'gstin' is not found, use an empty string or 0 for numeric fields.

For 'invoiceItems', create an array of objects, where each object represents a distinct line item from all invoices in the document. For each line item, extract: 'invoiceNumber' (the invoice number from which this line item was taken), 'gstRate', 'hsnCode', 'quantity', 'taxableValue', 'igst', 'cgst', 'sgst'. It is very important to correctly associate each line item with its parent invoice number. If a value is not found, use an empty string or 0 for numeric fields.

Strictly adhere to the provided JSON schema. Do not include any extra text, explanations, or markdown formatting in your response. The output must be a clean, parseable JSON object."""


def _string(description: str) -> types.Schema:
    return types.Schema(type=types.Type.STRING, description=description)


def _number(description: str) -> types.Schema:
    return types.Schema(type=types.Type.NUMBER, description=description)


INVOICE_SUMMARY_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "gstin": _string(
            "The CUSTOMER's GST Identification Number. This should not be the supplier's GSTIN. "
            "If not available, it should be an empty string."
        ),
        "customerName": _string("The name of the customer."),
        "invoiceNumber": _string("The unique invoice number."),
        "invoiceDate": _string("The date of the invoice (YYYY-MM-DD)."),
        "invoiceValue": _number("The total value of the invoice."),
        "gstRate": _string("The primary or a comma-separated list of GST rates applicable."),
        "taxableValue": _number("The total taxable value."),
        "igst": _number("The total IGST amount."),
        "cgst": _number("The total CGST amount."),
        "sgst": _number("The total SGST amount."),
        "cess": _number("The total CESS amount."),
    },
    required=["gstin", "customerName", "invoiceNumber", "invoiceDate", "invoiceValue", "taxableValue"],
)

INVOICE_ITEM_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "invoiceNumber": _string("The invoice number this line item belongs to."),
        "gstRate": _string("The GST rate for the line item."),
        "hsnCode": _string("The HSN code for the product/service."),
        "quantity": _number("The quantity of the item."),
        "taxableValue": _number("The taxable value of the line item."),
        "igst": _number("The IGST amount for the line item."),
        "cgst": _number("The CGST amount for the line item."),
        "sgst": _number("The SGST amount for the line item."),
    },
    required=["invoiceNumber", "hsnCode", "quantity", "taxableValue"],
)

EXTRACTION_RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "invoiceSummary": types.Schema(
            type=types.Type.ARRAY,
            description="An array of objects, each representing an invoice summary.",
            items=INVOICE_SUMMARY_SCHEMA,
        ),
        "invoiceItems": types.Schema(
            type=types.Type.ARRAY,
            description="An array of objects, each representing a line item from the invoice(s).",
            items=INVOICE_ITEM_SCHEMA,
        ),
    },
    required=["invoiceSummary", "invoiceItems"],
)
