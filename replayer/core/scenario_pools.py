"""Fixed value pools drawn from when rendering scenario payloads."""

__all__ = [
    "ACTIVITY_CODES",
    "BANKS",
    "IBAN_BANK_CODES",
    "RECEIVER_NAMES",
    "SENDER_NAMES",
    "TRANSACTION_COMMENTS",
    "USER_ACTIVITIES",
    "USER_ID_PREFIXES",
    "USER_PROFILES",
    "USER_TYPES",
]

USER_PROFILES = (
    "Customer is a small retailer with average daily 6–8 Raast transactions",
    "Account mostly used for salary credits and few monthly transfers",
    "Normally local transfers, first international transaction today",
    "This Customer has salary account",
    "Dormant account active after 9 months",
    "Customer usually shops daily online",
    "Pensioner account",
    "Regular grocery trader",
    "Small business owner",
    "Salaried individual",
    "Freelancer",
    "Corporate account holder",
    "Individual customer",
    "Small shopkeeper",
    "Regular utility bill payer",
    "Student account holder",
    "Export business owner",
    "Online merchant",
    "Construction business owner",
    "Medical practitioner",
    "Retail store owner",
    "Restaurant owner",
    "Textile manufacturer",
    "Real estate agent",
    "Transport company owner",
    "IT services provider",
    "Pharmaceutical distributor",
    "Electronics dealer",
    "Automobile trader",
    "Jewelry shop owner",
    "Travel agent",
)

USER_ACTIVITIES = (
    "Recently showed higher activity than usual",
    "Unusual number of outward transfers today",
    "1 transaction only",
    "Today made 3 transactions",
    "Today made 1 transaction only",
    "Today made 5 transactions",
    "Today made 1 transaction",
    "Today made 18 transactions",
    "Today made 12 transactions",
    "Today made 25 transactions",
    "Today made 7 transactions",
    "Today made 2 transactions",
    "Today made 15 transactions",
    "Today made 9 transactions",
    "Typically makes 5–7 transactions daily",
    "Typically makes 2–4 transactions daily",
    "Typically makes 10–15 transactions daily",
    "Typically makes 1–2 transactions daily",
    "Usually 2–3 salary transfers per month",
    "Usually 4–5 supplier payments per week",
    "Usually 1–2 international transfers per month",
    "Receives foreign remittances monthly",
    "Receives domestic transfers weekly",
    "First transaction in 6 months",
    "First transaction in 3 months",
    "First international transaction this year",
    "Weekly bulk transfers",
    "Monthly utility payments",
    "Daily cash deposits",
    "Irregular transaction pattern",
    "High frequency micro-transactions",
    "Low frequency high-value transactions",
)

SENDER_NAMES = (
    "AHMED STORE", "MANSOOR KHAN", "BILAL SAEED", "AHMAD KHAN",
    "UNKNOWN", "HINA TARIQ", "RASHID ALI", "HUSSAIN TRADERS",
    "UMER ALI", "MALIK TRADERS", "AHMED ENTERPRISES", "WESTERN UNION",
    "STAR IMPORTS LLC", "BILAL AHMAD", "RASHID STORE", "KASHIF MALIK",
    "HASSAN RAZA", "FATIMA TEXTILES", "KARACHI STEEL", "SALMAN KHAN",
    "ZAINAB CORPORATION", "ABDUL REHMAN", "SARA ENTERPRISES",
    "MUHAMMAD FAROOQ", "NADIA TRADING", "TARIQ FOODS", "AMINAH BOUTIQUE",
    "YOUSUF ELECTRONICS", "KHADIJA TEXTILES", "OMAR CONSTRUCTION",
    "RAFIA MEDICAL", "SAEED TRANSPORT", "MARIAM JEWELERS",
    "ADNAN PHARMA", "FARAH AUTO PARTS", "IBRAHIM STEEL",
    "AYESHA COSMETICS", "SHAHID MOTORS", "RUBINA FABRICS",
    "NAEEM HARDWARE", "SABEEN TRAVELS", "WASEEM BOOKS",
    "SAMINA GARMENTS", "RAZZAQ FRUITS", "BUSHRA BAKERY",
    "FAISAL SPARES", "NASREEN CLINIC",
)

RECEIVER_NAMES = (
    "BILAL ASSOCIATES", "FAST UTILITY SERVICE", "MICHAEL BROWN",
    "FAST INTERNET PVT LTD", "MALIK ENTERPRISES", "DARAZ PAKISTAN",
    "SELF", "K-ELECTRIC", "GLOBAL IMPORTS", "HESCO BILLING",
    "KASHIF MALIK", "HASSAN RAZA", "ASIA GLOBAL", "EASYPAISA WALLET",
    "UTILITY COMPANY", "MOBILE ACCOUNT", "FOOD PANDA",
    "CAREEM WALLET", "UBER EATS", "AMAZON PAYMENTS", "ALIBABA GROUP",
    "SSGC BILLING", "PTCL PAYMENTS", "JAZZ CASH", "TELENOR BANK",
    "NATIONAL BANK", "MCB DIGITAL", "HBL KONNECT", "UBL OMNI",
    "GOVT TREASURY", "TAX OFFICE", "CUSTOMS DEPT", "WAPDA BILLING",
    "RAILWAY BOOKING", "PIA TICKETING", "SERENA HOTELS",
    "PEARL CONTINENTAL", "GOURMET FOODS", "METRO CASH",
    "IMTIAZ SUPER", "HYPERSTAR", "AL-FATAH STORES", "CHEN ONE",
    "SAPPHIRE RETAIL", "KHAADI STORES",
)

TRANSACTION_COMMENTS = (
    "Payment for machinery", "Electricity Bill", "Business Investment",
    "Monthly Internet Bill", "Urgent Machinery Payment", "Order #112233",
    "Routine Cash Need", "Urgent Import Settlement", "Electricity bill for warehouse",
    "Employee salary transfer", "Freelance payment", "Container clearance payment",
    "Load wallet for shopping", "Daily deposit of shop sales", "Monthly utility bill",
    "Gas bill payment", "Water bill payment", "Internet bill payment",
    "Mobile bill payment", "Insurance premium", "Loan installment",
    "Credit card payment", "Rent payment", "Medical expenses",
    "School fee payment", "University tuition", "Travel booking payment",
    "Hotel booking", "Flight ticket payment", "Online shopping",
    "Grocery purchase", "Fuel payment", "Car maintenance",
    "Investment deposit", "Tax payment", "Charity donation",
    "Business equipment purchase", "Office supplies", "Raw material purchase",
    "Supplier payment", "Vendor settlement", "Commission payment",
    "Bonus distribution", "Dividend payment", "Refund processing",
    "Emergency transfer", "Family support", "Wedding expenses",
    "Festival preparation", "Property down payment", "Vehicle installment",
    "Construction payment", "Equipment lease", "Software subscription",
    "Professional services", "Legal fees",
)

ACTIVITY_CODES = (
    "Bill Payment", "Raast FT", "Fund Transfer", "Credit Inflow",
    "Cash Deposit", "Wallet Load", "Utility Payment", "Salary Transfer",
    "International Transfer", "Merchant Payment", "Online Payment",
    "ATM Withdrawal", "Mobile Banking", "Remittance", "Investment", "Loan Payment",
)

USER_TYPES = ("MOBILE", "WEB", "BRANCH", "API", "USSD", "ATM")

BANKS = (
    "HABBPKKA001", "MCBLPKKA001", "HBLPKKA001", "MCBPKKA002",
    "NBPAPKKA004", "UBLPKKA007", "HBLPKKA009", "BAHL12345",
    "ALFAPKKA888", "KASHPKKA123", "MBLBPKKA007", "JSBLPKKA200",
    "FAYSPKKA134", "SCBLPKKA890", "CITIPKKA567", "DEUTPKKA445",
    "SMBCPKKA332", "BARPPKKA667", "CHASPKKA889", "BKIDPKKA778",
    "TEBAPKKA555", "SILKPKKA666", "BIBLPKKA444",
)

IBAN_BANK_CODES = ("HBL", "MCB", "NBP", "UBL", "BAHL", "ALFH", "JSBL", "FAYS", "SCBL", "CITI")

USER_ID_PREFIXES = (
    "user", "shop", "corp", "cust", "bus", "trade",
    "acc", "client", "merchant", "agent", "vendor", "retail",
)
