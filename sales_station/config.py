"""
Sales Station — Configuration: paths, backend selection, column mapping, catalog.
"""
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths: override with SALES_STATION_DATA_DIR env var for deployment
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("SALES_STATION_DATA_DIR", str(Path.home() / ".sales_station")))
LOCAL_STORE_FOLDER = _data_dir / "local_storage"

# Slot name inside the local key-value store
LOCAL_STORE_KEY = "morandi_sales_data"

# ---------------------------------------------------------------------------
# Backend selection: a sheet URL switches the whole process to remote mode
# ---------------------------------------------------------------------------
SHEET_ENDPOINT_URL = os.environ.get("SALES_STATION_SHEET_URL", "").strip() or None
REMOTE_TIMEOUT = float(os.environ.get("SALES_STATION_REMOTE_TIMEOUT", "30"))

LOG_LEVEL = os.environ.get("SALES_STATION_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# ---------------------------------------------------------------------------
# Record fields → localized spreadsheet headers (order is the report order)
# ---------------------------------------------------------------------------
REQUIRED_COLUMNS = {
    "date": "日期",
    "category": "類別",
    "product_name": "品名",
    "quantity": "數量",
    "amount": "銷售金額",
}

# Header aliases accepted on import. English keys are matched lower-cased.
COLUMN_MAP = {
    "日期": "date",
    "類別": "category",
    "品名": "product_name",
    "數量": "quantity",
    "銷售金額": "amount",
    "date": "date",
    "category": "category",
    "product": "product_name",
    "product name": "product_name",
    "productname": "product_name",
    "product_name": "product_name",
    "quantity": "quantity",
    "qty": "quantity",
    "amount": "amount",
    "total amount": "amount",
    "sales amount": "amount",
}

# ---------------------------------------------------------------------------
# Spreadsheet serial dates: day 25569 is 1970-01-01
# ---------------------------------------------------------------------------
SPREADSHEET_EPOCH_OFFSET_DAYS = 25569
MS_PER_DAY = 86_400_000

IMPORT_EXTENSIONS = {".xlsx", ".xlsm", ".xls", ".csv"}

# ---------------------------------------------------------------------------
# Dashboard sentinels
# ---------------------------------------------------------------------------
ALL_PRODUCTS = "all"
NO_TOP_PRODUCT = "-"

# Rows shown in the latest-details table, newest first
RECENT_DETAIL_LIMIT = 100

# ---------------------------------------------------------------------------
# Entry form catalog: category → products offered in the form dropdowns
# ---------------------------------------------------------------------------
PRODUCT_CATALOG = {
    "洗髮露": [
        "強健頭皮洗髮露500ml",
        "豐盈彈韌洗髮露500ml",
        "結構修護洗髮露500ml",
        "染燙護色洗髮露500ml",
        "濃縮咖啡因養髮洗髮露500mL",
    ],
    "養髮液": [
        "咖啡因養髮液100ml_PRO",
        "咖啡因麥拉寧養髮液100ml_PRO",
        "女士養髮液70ml",
        "男士養髮液70ml",
    ],
    "居家保養": [
        "豐盈彈韌精華油70ml",
        "豐盈彈韌調理精華220ml",
        "結構修護精華乳70ml",
        "染燙護色精華油70ml",
    ],
    "洗髮精": [
        "香檸草修護洗髮精2L_3入",
        "木蘭保濕洗髮精2L_3入",
        "薔薇護色洗髮精2L_3入",
        "雪松橙控油洗髮精2L_3入",
        "薰衣草深層洗髮精2L_3入",
    ],
}
