"""Example 02 — Market Basket Analysis on the UCI Online Retail II dataset.

Dataset
-------
Online Retail II (UCI Machine Learning Repository)
~500k invoice lines (2010-2011 sheet) from a UK online gift retailer.
Auto-downloaded as an Excel workbook on first run; reading it needs
``openpyxl``.

Concepts demonstrated
---------------------
* `TransactionStore.from_dataframe()` — invoice lines → baskets
* `.summary()` / `.item_frequency()` — basket sizes and top sellers
* `Apriori.from_pandas()` + `.mine()` — rules at support 1%, confidence 30%
* `.subset()` / `.sort()` / `.head()` — rule inspection
* `eclat()` — frequent itemsets of two or more products

Run
---
    python examples/02_online_retail_basket_analysis.py
"""

from __future__ import annotations

import re
import sys
from pathlib import Path

import pandas as pd

from basketrules import Apriori, TransactionStore, eclat

# ---------------------------------------------------------------------------
# 1. Download the dataset (cached to examples/data/)
# ---------------------------------------------------------------------------

DATA_DIR = Path(__file__).parent / "data"
EXCEL_PATH = DATA_DIR / "online_retail_II.xlsx"
UCI_URL = "https://archive.ics.uci.edu/static/public/502/online+retail+ii.zip"


def download_dataset() -> None:
    if EXCEL_PATH.exists():
        print(f"✔ Dataset already at {EXCEL_PATH.name}")
        return
    DATA_DIR.mkdir(exist_ok=True)
    print("Downloading Online Retail II from UCI …", end=" ", flush=True)
    import urllib.request
    import zipfile

    zip_path = DATA_DIR / "online_retail_II.zip"
    try:
        urllib.request.urlretrieve(UCI_URL, zip_path)
    except OSError as exc:
        print(f"\nDownload failed: {exc}")
        print(
            "Please download manually from:\n"
            "  https://archive.ics.uci.edu/dataset/502/online+retail+ii\n"
            f"and save the Excel file to: {EXCEL_PATH}"
        )
        sys.exit(1)
    with zipfile.ZipFile(zip_path, "r") as z:
        xlsx_names = [n for n in z.namelist() if n.lower().endswith(".xlsx")]
        if not xlsx_names:
            raise FileNotFoundError("No .xlsx found in downloaded zip")
        z.extract(xlsx_names[0], DATA_DIR)
        (DATA_DIR / xlsx_names[0]).rename(EXCEL_PATH)
    zip_path.unlink(missing_ok=True)
    print("done.")


# ---------------------------------------------------------------------------
# 2. Load and clean
# ---------------------------------------------------------------------------


def load_invoice_lines() -> pd.DataFrame:
    print("Loading Excel … (this may take 15-30 s on first run)")
    df = pd.read_excel(
        EXCEL_PATH,
        sheet_name="Year 2010-2011",
        usecols="A:C",
        dtype=str,
        engine="openpyxl",
    )[["Invoice", "Description"]]
    print(f"  Raw rows: {len(df):,}")

    # Drop cancellations (invoice starts with C), blanks and discounts
    df = df.dropna()
    df = df[(df["Description"] != "Discount") & ~df["Invoice"].str.match(r"^[cC]")].copy()
    df["Description"] = (
        df["Description"]
        .map(lambda s: re.sub(r"\s+", " ", s).strip().lower())
        .str.replace(r"['.,]", "", regex=True)
    )
    df = df[df["Description"] != ""]
    print(f"  Clean rows: {len(df):,} | Invoices: {df['Invoice'].nunique():,}")
    return df


# ---------------------------------------------------------------------------
# 3. Main workflow
# ---------------------------------------------------------------------------


def main() -> None:
    download_dataset()
    df = load_invoice_lines()

    # -----------------------------------------------------------------------
    # 3a. Baskets
    # -----------------------------------------------------------------------
    print("\n── Step 1: Build baskets ──")
    store = TransactionStore.from_dataframe(df, transaction_col="Invoice", item_col="Description", verbose=1)
    print(store.summary(top_n=10))

    print("\nItems with a support of at least 7%:")
    print(store.item_frequency(min_support=0.07).to_string())

    # -----------------------------------------------------------------------
    # 3b. Apriori rules
    # -----------------------------------------------------------------------
    print("\n── Step 2: Apriori (min_support=0.01, min_confidence=0.3) ──")
    model = Apriori(store, min_support=0.01, min_confidence=0.3, verbose=1)
    rules = model.mine()
    print(f"  Found {len(rules):,} rules")
    print(rules.describe().to_string())

    print("\nRules of size 2:")
    print(rules.subset(size=2).head(10).to_frame().to_string(index=False))

    print("\nSome rules with more than 3 items:")
    print(rules.subset(min_size=4).head().to_frame().to_string(index=False))

    print("\nTop 11 rules by lift:")
    print(rules.sort(by="lift").head(11).to_frame().to_string(index=False))

    heart_rhs = rules.subset(rhs="white hanging heart t-light holder")
    print(f"\nRules recommending the white hanging heart t-light holder ({len(heart_rhs)}):")
    print(heart_rhs.to_frame().to_string(index=False))

    # -----------------------------------------------------------------------
    # 3c. Eclat itemsets
    # -----------------------------------------------------------------------
    print("\n── Step 3: Eclat (min_support=0.01, min_len=2) ──")
    sets = eclat(store, min_support=0.01, min_len=2, verbose=1)
    print(f"  Found {len(sets):,} itemsets")
    print(sets.size_distribution().to_string())
    print(sets.sort(by="support").head(9).to_frame().to_string(index=False))

    print("\n✅ Done!")


if __name__ == "__main__":
    main()
