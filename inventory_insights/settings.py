import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
DATA_DIR = BASE_DIR / os.getenv("DATA_DIR", "data")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")

# --- Filename Configuration ---
STORE_FILENAME = os.getenv("STORE_FILENAME", "store.json")
REPORT_FILENAME_BASE = os.getenv("REPORT_FILENAME", "inventory_report")

# --- Logging ---
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")
LOG_FILENAME = os.getenv("LOG_FILENAME", "inventory_insights.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")
WEBHOOK_TIMEOUT_SECONDS = int(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "15"))

# --- Alerting ---
EXPIRY_WARNING_DAYS = int(os.getenv("INVENTORY_EXPIRY_WARNING_DAYS", "30"))
LOW_STOCK_THRESHOLD = int(os.getenv("LOW_STOCK_THRESHOLD", "2"))

# --- History Windows ---
# The store keeps one global list; reports only ever look at a client's newest slice.
MAX_STORED_SUBMISSIONS = int(os.getenv("MAX_STORED_SUBMISSIONS", "1000"))
HISTORY_FETCH_LIMIT = int(os.getenv("HISTORY_FETCH_LIMIT", "52"))
TREND_WINDOW = int(os.getenv("TREND_WINDOW", "12"))
USAGE_SUMMARY_WINDOW = int(os.getenv("USAGE_SUMMARY_WINDOW", "8"))
CONSUMPTION_WINDOW_DAYS = int(os.getenv("CONSUMPTION_WINDOW_DAYS", "30"))
CONSUMPTION_TOP_N = int(os.getenv("CONSUMPTION_TOP_N", "10"))
INACTIVE_CLIENT_DAYS = int(os.getenv("INACTIVE_CLIENT_DAYS", "7"))

# --- Store Keys ---
SUBMISSIONS_KEY = "inventory_submissions"
TEMPLATE_KEY = "inventory_template"
CUSTOM_ITEMS_KEY_PREFIX = "inventory_custom_"
CLIENTS_KEY = "clients"

# --- Shared Business Logic ---
# Default item template used until an admin saves a custom one.
DEFAULT_INVENTORY_ITEMS = [
    {
        "category": "Ancillary Supplies",
        "items": ["Acid Wash Solution", "Alkaline Wash Solution"],
    },
    {
        "category": "Calibrators",
        "items": [
            "BHB - L1 - Cal",
            "Creatinine - L1",
            "Creatinine - L2",
            "Glucose - L1",
            "Hemo - L1",
            "HS Nitrite - L1 - Cal",
            "HS Nitrite - L2 - Cal",
            "HS Nitrite - L3 - Cal",
            "Leukocyte Esterase - L1 - Cal",
            "Leukocyte Esterase - L2 - Cal",
            "Leukocyte Esterase - L3 - Cal",
            "Microalbumin - L1",
            "Microalbumin - L2",
            "Microalbumin - L3",
            "Microalbumin - L4",
            "Microalbumin - L5",
            "Microalbumin - L6",
            "Microprotein - L1",
            "pH - L1",
            "pH - L2",
            "SG - L1",
            "SG - L2",
            "Urobilinogen - L1",
            "Urobilinogen - L2",
            "Urobilinogen - L3",
            "Urobilinogen - L4",
            "Urobilinogen - L5",
        ],
    },
    {
        "category": "Controls",
        "items": [
            "A-Level - L4",
            "A-Level - L5",
            "A-Level - L6",
            "BHB - L1",
            "BHB - L2",
            "Bilirubin Stock 30",
            "Bilirubin Zero",
            "Biorad - L1",
            "Biorad - L2",
            "Hemoglobin 500 - L1",
            "Hemoglobin 5000 - L2",
            "HS Nitrite - L1",
            "HS Nitrite - L2",
            "Leukocyte Esterase - L1",
            "Leukocyte Esterase - L2",
            "Leukocyte Esterase - L3",
            "Urobilinogen - Control 1",
            "Urobilinogen - Control 2",
        ],
    },
    {
        "category": "Reagent",
        "items": [
            "BHB - R1",
            "BHB - R2",
            "Bilirubin - R1",
            "Bilirubin - R2",
            "Creatinine - R1",
            "Creatinine - R2",
            "Glucose - R1",
            "Hemoglobin - R1",
            "HS Nitrite - R1",
            "HS Nitrite - R2",
            "Leukocyte Esterase - R1",
            "Leukocyte Esterase - R2",
            "Microalbumin - R1",
            "Microalbumin - R2",
            "Microprotein - R1",
            "pH - R1",
            "SG - R1",
            "Urobilinogen - R1",
            "Urobilinogen - R2",
        ],
    },
]
