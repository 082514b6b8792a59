#!/usr/bin/env python3
"""
Generate sample billing-export CSV files for exercising the claims import
preview and column mapping.

Each file mimics a different practice-management system: different header
spellings, money written as ``$1,234.56`` / ``(42.10)`` / plain numbers, and a
sprinkling of blank cells and blank lines.
"""

import csv
import os
import random
from datetime import date, timedelta

random.seed(42)

OUTPUT_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "sample_data")
CLEAN_CSV = os.path.join(OUTPUT_DIR, "sample_billing_export.csv")
MESSY_CSV = os.path.join(OUTPUT_DIR, "sample_billing_export_messy.csv")
UNMAPPED_CSV = os.path.join(OUTPUT_DIR, "sample_unmapped_export.csv")

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

DATE_START = date(2024, 1, 1)
DATE_END = date(2025, 6, 30)

FIRST_NAMES = ["Jane", "John", "Maria", "Wei", "Aisha", "Carlos", "Emily", "Noah", "Priya", "Omar"]
LAST_NAMES = ["Doe", "Smith", "Garcia", "Chen", "Khan", "Lopez", "Nguyen", "Brown", "Patel", "Ali"]
PHARMACIES = ["Main St Pharmacy", "Oak Park Rx", "Riverside Compounding", "Downtown Drug"]
CPT_CODES = ["99213", "99214", "J3301", "J1100", "96372", "A4253", "E0607"]
BILLING_STATUSES = ["Pending", "Billed", "Paid", "Collections"]
PAYMENT_STATUSES = ["PAID", "DENIED", "PENDING"]


def random_date(start=DATE_START, end=DATE_END):
    return start + timedelta(days=random.randint(0, (end - start).days))


def money(value):
    return round(value, 2)


def fmt_money(value, style):
    """Render an amount the way one export system or another would."""
    if style == "plain":
        return f"{value:.2f}"
    if style == "dollar":
        sign = "-" if value < 0 else ""
        return f"{sign}${abs(value):,.2f}"
    # accounting: negatives in parentheses
    if value < 0:
        return f"(${abs(value):,.2f})"
    return f"${value:,.2f}"


def random_patient():
    first = random.choice(FIRST_NAMES)
    last = random.choice(LAST_NAMES)
    dob = random_date(date(1940, 1, 1), date(2005, 12, 31))
    account = f"{first[0]}{dob.month:02d}0{dob.day:02d}{last[0]}{dob.year}"
    return account, f"{first} {last}"


def random_amounts():
    charged = money(random.uniform(25, 2500))
    adjustment = money(charged * random.uniform(0, 0.4))
    ins_paid = money((charged - adjustment) * random.uniform(0, 0.9))
    responsibility = money(charged - adjustment - ins_paid)
    patient_paid = money(responsibility * random.choice([0, 0, 0.5, 1]))
    balance = money(responsibility - patient_paid)
    # refunds and overpayments show up as negative balances
    if random.random() < 0.05:
        balance = -money(random.uniform(5, 80))
    return charged, adjustment, ins_paid, responsibility, patient_paid, balance


# ---------------------------------------------------------------------------
# Export layouts
# ---------------------------------------------------------------------------

CLEAN_HEADERS = [
    "Account Number", "Patient Name", "Service Date", "CPT", "Pharmacy", "Rx Number",
    "Total Charge", "Insurance Adjustment", "Insurance Paid", "Patient Responsibility",
    "Amount Paid", "Balance Due", "Billing Status", "Payment Status", "Notes",
]

MESSY_HEADERS = [
    "ACCT", "  patient ", "DOS", "Procedure  Code", "Location", "Billed", "Adjustment",
    "Ins Paid", "Patient Resp", "Paid Amount", "Balance", "Status", "Statement Mailed",
    "Statement 2 Date", "Comments", "Referring Provider",
]

UNMAPPED_HEADERS = ["MRN", "Encounter", "Visit Dt", "Gross", "Net"]


def generate_clean_row():
    account, name = random_patient()
    charged, adjustment, ins_paid, responsibility, patient_paid, balance = random_amounts()
    return [
        account,
        name,
        random_date().isoformat(),
        random.choice(CPT_CODES),
        random.choice(PHARMACIES),
        f"RX{random.randint(100000, 999999)}",
        fmt_money(charged, "plain"),
        fmt_money(adjustment, "plain"),
        fmt_money(ins_paid, "plain"),
        fmt_money(responsibility, "plain"),
        fmt_money(patient_paid, "plain"),
        fmt_money(balance, "plain"),
        random.choice(BILLING_STATUSES),
        random.choice(PAYMENT_STATUSES),
        "",
    ]


def generate_messy_row():
    account, name = random_patient()
    charged, adjustment, ins_paid, responsibility, patient_paid, balance = random_amounts()
    style = random.choice(["dollar", "accounting", "plain"])
    service = random_date()
    mailed = service + timedelta(days=random.randint(10, 40))
    second = mailed + timedelta(days=30)
    return [
        account,
        # some exports drop the name
        name if random.random() > 0.05 else "",
        service.strftime("%m/%d/%Y"),
        random.choice(CPT_CODES),
        random.choice(PHARMACIES),
        fmt_money(charged, style),
        fmt_money(adjustment, style) if random.random() > 0.2 else "",
        fmt_money(ins_paid, style),
        fmt_money(responsibility, style),
        fmt_money(patient_paid, style),
        fmt_money(balance, style),
        random.choice(BILLING_STATUSES),
        mailed.strftime("%m/%d/%Y") if random.random() > 0.3 else "",
        second.strftime("%m/%d/%Y") if random.random() > 0.7 else "",
        random.choice(["", "", "called pt re: balance", "sent to collections", "refund issued"]),
        f"Dr. {random.choice(LAST_NAMES)}",
    ]


def generate_unmapped_row():
    return [
        f"MRN{random.randint(10000, 99999)}",
        f"ENC-{random.randint(1000, 9999)}",
        random_date().strftime("%Y%m%d"),
        money(random.uniform(25, 900)),
        money(random.uniform(0, 400)),
    ]


def write_csv(path, headers, rows, blank_every=0):
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(headers)
        for i, row in enumerate(rows, start=1):
            writer.writerow(row)
            if blank_every and i % blank_every == 0:
                writer.writerow([])

    print(f"CSV written: {path}")
    print(f"  Total rows: {len(rows)}")


if __name__ == "__main__":
    os.makedirs(OUTPUT_DIR, exist_ok=True)
    print("Generating sample billing exports...\n")
    write_csv(CLEAN_CSV, CLEAN_HEADERS, [generate_clean_row() for _ in range(200)])
    write_csv(MESSY_CSV, MESSY_HEADERS, [generate_messy_row() for _ in range(300)], blank_every=50)
    write_csv(UNMAPPED_CSV, UNMAPPED_HEADERS, [generate_unmapped_row() for _ in range(25)])
    print("\nDone! Files generated in:", OUTPUT_DIR)
