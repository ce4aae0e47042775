"""Built-in document menu seeded into an empty catalog.

Each entry is (code, name, localized name, category, base credit cost).
Providers edit costs and toggle types afterwards through the catalog API.
"""

DEFAULT_DOCUMENT_TYPES: list[tuple[str, str, str, str, int]] = [
    # Academic
    ("id_card",             "Student ID Card",                 "ছাত্র পরিচয়পত্র",            "academic",       2),
    ("transcript",          "Academic Transcript",             "একাডেমিক ট্রান্সক্রিপ্ট",      "academic",       4),
    ("progress_report",     "Progress Report",                 "অগ্রগতি প্রতিবেদন",          "academic",       3),
    ("routine",             "Class Routine",                   "ক্লাসের রুটিন",              "academic",       2),
    ("marksheet",           "Marksheet",                       "নম্বরপত্র",                  "academic",       3),
    # Examination
    ("admit_card",          "Admit Card",                      "প্রবেশপত্র",                 "examination",    3),
    ("exam_schedule",       "Exam Schedule",                   "পরীক্ষার সময়সূচি",           "examination",    2),
    # Certificates
    ("excellence_cert",     "Academic Excellence Certificate", "একাডেমিক শ্রেষ্ঠত্ব সনদপত্র",  "certificate",    3),
    ("character_cert",      "Character Certificate",           "চরিত্র সনদপত্র",              "certificate",    2),
    ("transfer_cert",       "Transfer Certificate",            "স্থানান্তর সনদপত্র",          "certificate",    3),
    ("testimonial",         "Testimonial",                     "প্রশংসাপত্র",                 "certificate",    2),
    # Financial
    ("fee_receipt",         "Fee Receipt",                     "ফি রসিদ",                   "financial",      1),
    ("salary_slip",         "Salary Slip",                     "বেতন স্লিপ",                  "financial",      1),
    # Administrative
    ("teacher_id_card",     "Teacher ID Card",                 "শিক্ষক পরিচয়পত্র",            "administrative", 2),
    ("library_card",        "Library Card",                    "লাইব্রেরি কার্ড",              "administrative", 1),
]
