"""
Utilities for Reports module

Provides CSV export functionality and the per-report row preparation
used by the ``export=csv`` option of every report endpoint.
"""

import csv
import io
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List

from fastapi import Response


def create_csv_response(
    data: List[Dict[str, Any]],
    filename: str,
    headers: Dict[str, str] = None
) -> Response:
    """
    Create a CSV response from a list of dictionaries.

    Args:
        data: List of dictionaries with report data
        filename: Name for the CSV file
        headers: Optional mapping of field names to CSV headers

    Returns:
        FastAPI Response with CSV content
    """
    output = io.StringIO()

    if data or headers:
        fieldnames = list(headers.keys()) if headers else list(data[0].keys())
        csv_headers = list(headers.values()) if headers else fieldnames

        writer = csv.DictWriter(output, fieldnames=fieldnames, extrasaction="ignore")
        writer.writerow(dict(zip(fieldnames, csv_headers)))

        for row in data:
            writer.writerow({key: format_csv_value(row.get(key)) for key in fieldnames})

    csv_content = output.getvalue()
    output.close()

    return Response(
        content=csv_content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


def format_csv_value(value: Any) -> str:
    """
    Format a value for CSV export.

    Amounts keep two decimals; enums are written by value.
    """
    if value is None:
        return ""
    elif isinstance(value, Enum):
        return str(value.value)
    elif isinstance(value, Decimal):
        return f"{value:.2f}"
    elif isinstance(value, (date, datetime)):
        return value.isoformat()
    elif isinstance(value, bool):
        return "Yes" if value else "No"
    else:
        return str(value)


def prepare_aging_csv(report_data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Prepare receivable/payable rows for CSV export"""
    return [dict(item) for item in report_data["documents"]]


def prepare_documents_csv(report_data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    """Prepare sales (``invoices``) or purchase (``purchases``) rows for CSV export"""
    return [dict(item) for item in report_data[key]]


def prepare_tax_csv(report_data: Dict[str, Any]) -> List[Dict[str, Any]]:
    csv_data = [dict(row) for row in report_data["rates"]]
    csv_data.append({
        "tax_rate": "Total",
        "tax_collected": report_data["total_tax_collected"],
        "tax_paid": report_data["total_tax_paid"],
        "net_tax": report_data["net_tax_payable"],
    })
    return csv_data


def prepare_profit_loss_csv(report_data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """One row per month followed by the period total"""
    csv_data = [dict(row) for row in report_data["monthly"]]
    csv_data.append({
        "month": "Total",
        "revenue": report_data["revenue"],
        "purchase_cost": report_data["purchase_cost"],
        "gross_profit": report_data["gross_profit"],
    })
    return csv_data


def prepare_inventory_csv(report_data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """One row per product followed by the inventory total"""
    csv_data = [dict(item) for item in report_data["items"]]
    summary = report_data["summary"]
    csv_data.append({
        "product_name": "Total",
        "stock_quantity": summary["total_items_in_stock"],
        "stock_value": summary["total_inventory_value"],
    })
    return csv_data


_AGING_HEADERS = {
    "document_number": "Number",
    "party_name": "Party",
    "document_date": "Date",
    "due_date": "Due Date",
    "total_amount": "Total",
    "amount_paid": "Paid",
    "balance_due": "Balance Due",
    "days_overdue": "Days Overdue",
    "aging_bucket": "Aging",
}

_DOCUMENT_HEADERS = {
    "document_number": "Number",
    "document_date": "Date",
    "due_date": "Due Date",
    "party_name": "Party",
    "subtotal": "Subtotal",
    "tax_amount": "Tax",
    "total_amount": "Total",
    "amount_paid": "Paid",
    "balance_due": "Balance Due",
    "payment_status": "Status",
}

CSV_HEADERS = {
    "accounts_receivable": {**_AGING_HEADERS, "party_name": "Customer"},
    "accounts_payable": {**_AGING_HEADERS, "party_name": "Supplier"},
    "sales": {**_DOCUMENT_HEADERS, "document_number": "Invoice", "party_name": "Customer"},
    "purchases": {**_DOCUMENT_HEADERS, "document_number": "Purchase", "party_name": "Supplier"},
    "tax": {
        "tax_rate": "Tax Rate (%)",
        "taxable_sales": "Taxable Sales",
        "tax_collected": "Tax Collected",
        "taxable_purchases": "Taxable Purchases",
        "tax_paid": "Tax Paid",
        "net_tax": "Net Tax",
    },
    "profit_loss": {
        "month": "Month",
        "revenue": "Revenue",
        "purchase_cost": "Purchase Cost",
        "gross_profit": "Gross Profit",
    },
    "inventory": {
        "sku": "SKU",
        "product_name": "Product",
        "category_name": "Category",
        "stock_quantity": "Stock",
        "low_stock_threshold": "Low Stock Threshold",
        "cost_price": "Cost Price",
        "stock_value": "Stock Value",
        "is_low_stock": "Low Stock",
        "last_movement_date": "Last Movement",
    },
}
