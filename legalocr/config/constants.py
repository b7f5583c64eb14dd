"""Application constants and domain vocabularies."""

ALLOWED_CONTENT_TYPES: set[str] = {
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/tiff",
    "image/bmp",
    "image/webp",
}

# =============================================================================
# Character sets
# =============================================================================

ARABIC_LETTERS = "ءآأؤإئابةتثجحخدذرسشصضطظعغفقكلمنهوىي"
ARABIC_TATWEEL = "ـ"
ARABIC_INDIC_DIGITS = "٠١٢٣٤٥٦٧٨٩"
EUROPEAN_DIGITS = "0123456789"
ARABIC_PUNCTUATION = "،؛؟"
# No quotes or spaces: the whitelist travels through a shell-split config string
COMMON_PUNCTUATION = "°-/.,:;()!"

ALGERIAN_ARABIC_WHITELIST = "".join(
    dict.fromkeys(
        ARABIC_LETTERS
        + ARABIC_TATWEEL
        + ARABIC_INDIC_DIGITS
        + EUROPEAN_DIGITS
        + ARABIC_PUNCTUATION
        + COMMON_PUNCTUATION
    )
)

ARABIC_DIGIT_MAP: dict[int, str] = {
    ord(arabic): european
    for arabic, european in zip(ARABIC_INDIC_DIGITS + "۰۱۲۳۴۵۶۷۸۹", EUROPEAN_DIGITS * 2)
}

# Bidi controls that OCR engines and PDF text layers leak into output
BIDI_CONTROL_CHARS = "\u200e\u200f\u202a\u202b\u202c\u202d\u202e\u2066\u2067\u2068\u2069"

PRESENTATION_LIGATURES: dict[str, str] = {
    "ﻻ": "لا",
    "ﻼ": "لا",
    "ﻷ": "لأ",
    "ﻸ": "لأ",
    "ﻹ": "لإ",
    "ﻺ": "لإ",
    "ﻵ": "لآ",
    "ﻶ": "لآ",
    "ﷲ": "الله",
}

# Symbols the engine emits in place of Arabic letters
ARTIFACT_GLYPHS: dict[str, str] = {
    "|": "ل",
    "]": "ي",
    "[": "ب",
    "{": "ج",
    "}": "ح",
    "`": "ء",
    "~": "ن",
}
PARASITE_SYMBOLS = "@#$%"

SENTENCE_PUNCTUATION = ".،؛!؟"

# =============================================================================
# Calendars
# =============================================================================

FRENCH_MONTHS: dict[str, str] = {
    "janvier": "01",
    "février": "02",
    "fevrier": "02",
    "mars": "03",
    "avril": "04",
    "mai": "05",
    "juin": "06",
    "juillet": "07",
    "août": "08",
    "aout": "08",
    "septembre": "09",
    "octobre": "10",
    "novembre": "11",
    "décembre": "12",
    "decembre": "12",
}

# Gregorian month names as printed in Algerian (Maghreb) and Mashriq Arabic
ARABIC_GREGORIAN_MONTHS: dict[str, str] = {
    "جانفي": "01",
    "يناير": "01",
    "فيفري": "02",
    "فبراير": "02",
    "مارس": "03",
    "أفريل": "04",
    "أبريل": "04",
    "ماي": "05",
    "مايو": "05",
    "جوان": "06",
    "يونيو": "06",
    "جويلية": "07",
    "يوليو": "07",
    "أوت": "08",
    "غشت": "08",
    "أغسطس": "08",
    "سبتمبر": "09",
    "أكتوبر": "10",
    "نوفمبر": "11",
    "ديسمبر": "12",
}

HIJRI_MONTHS: dict[str, str] = {
    "محرم": "01",
    "صفر": "02",
    "ربيع الأول": "03",
    "ربيع الثاني": "04",
    "ربيع الآخر": "04",
    "جمادى الأولى": "05",
    "جمادى الثانية": "06",
    "جمادى الآخرة": "06",
    "رجب": "07",
    "شعبان": "08",
    "رمضان": "09",
    "شوال": "10",
    "ذو القعدة": "11",
    "ذي القعدة": "11",
    "ذو الحجة": "12",
    "ذي الحجة": "12",
}

ARABIC_ORDINALS: dict[str, str] = {
    "الأولى": "1",
    "الثانية": "2",
    "الثالثة": "3",
    "الرابعة": "4",
    "الخامسة": "5",
    "السادسة": "6",
    "السابعة": "7",
    "الثامنة": "8",
    "التاسعة": "9",
    "العاشرة": "10",
}

# =============================================================================
# Territory and sectors
# =============================================================================

# (code, French name, Arabic name)
WILAYAS: list[tuple[str, str, str]] = [
    ("01", "Adrar", "أدرار"),
    ("02", "Chlef", "الشلف"),
    ("03", "Laghouat", "الأغواط"),
    ("04", "Oum El Bouaghi", "أم البواقي"),
    ("05", "Batna", "باتنة"),
    ("06", "Béjaïa", "بجاية"),
    ("07", "Biskra", "بسكرة"),
    ("08", "Béchar", "بشار"),
    ("09", "Blida", "البليدة"),
    ("10", "Bouira", "البويرة"),
    ("11", "Tamanrasset", "تمنراست"),
    ("12", "Tébessa", "تبسة"),
    ("13", "Tlemcen", "تلمسان"),
    ("14", "Tiaret", "تيارت"),
    ("15", "Tizi Ouzou", "تيزي وزو"),
    ("16", "Alger", "الجزائر"),
    ("17", "Djelfa", "الجلفة"),
    ("18", "Jijel", "جيجل"),
    ("19", "Sétif", "سطيف"),
    ("20", "Saïda", "سعيدة"),
    ("21", "Skikda", "سكيكدة"),
    ("22", "Sidi Bel Abbès", "سيدي بلعباس"),
    ("23", "Annaba", "عنابة"),
    ("24", "Guelma", "قالمة"),
    ("25", "Constantine", "قسنطينة"),
    ("26", "Médéa", "المدية"),
    ("27", "Mostaganem", "مستغانم"),
    ("28", "M'Sila", "المسيلة"),
    ("29", "Mascara", "معسكر"),
    ("30", "Ouargla", "ورقلة"),
    ("31", "Oran", "وهران"),
    ("32", "El Bayadh", "البيض"),
    ("33", "Illizi", "إليزي"),
    ("34", "Bordj Bou Arréridj", "برج بوعريريج"),
    ("35", "Boumerdès", "بومرداس"),
    ("36", "El Tarf", "الطارف"),
    ("37", "Tindouf", "تندوف"),
    ("38", "Tissemsilt", "تيسمسيلت"),
    ("39", "El Oued", "الوادي"),
    ("40", "Khenchela", "خنشلة"),
    ("41", "Souk Ahras", "سوق أهراس"),
    ("42", "Tipaza", "تيبازة"),
    ("43", "Mila", "ميلة"),
    ("44", "Aïn Defla", "عين الدفلى"),
    ("45", "Naâma", "النعامة"),
    ("46", "Aïn Témouchent", "عين تموشنت"),
    ("47", "Ghardaïa", "غرداية"),
    ("48", "Relizane", "غليزان"),
    ("49", "El M'Ghair", "المغير"),
    ("50", "El Meniaa", "المنيعة"),
    ("51", "Ouled Djellal", "أولاد جلال"),
    ("52", "Bordj Baji Mokhtar", "برج باجي مختار"),
    ("53", "Béni Abbès", "بني عباس"),
    ("54", "Timimoun", "تيميمون"),
    ("55", "Touggourt", "تقرت"),
    ("56", "Djanet", "جانت"),
    ("57", "In Salah", "عين صالح"),
    ("58", "In Guezzam", "عين قزام"),
]

# French sector name -> keywords in both scripts
SECTOR_KEYWORDS: dict[str, list[str]] = {
    "agriculture": ["agriculture", "agricole", "فلاحة", "الفلاحة", "زراعة"],
    "industrie": ["industrie", "industriel", "صناعة", "الصناعة"],
    "commerce": ["commerce", "commercial", "تجارة", "التجارة"],
    "transport": ["transport", "transports", "نقل", "النقل"],
    "éducation": ["éducation", "enseignement", "تربية", "التربية", "التعليم"],
    "santé": ["santé", "صحة", "الصحة"],
    "environnement": ["environnement", "بيئة", "البيئة"],
    "urbanisme": ["urbanisme", "عمران", "العمران", "التعمير"],
    "finance": ["finance", "finances", "مالية", "المالية"],
    "justice": ["justice", "عدل", "العدل"],
    "sécurité": ["sécurité", "أمن", "الأمن"],
    "culture": ["culture", "ثقافة", "الثقافة"],
    "jeunesse": ["jeunesse", "شباب", "الشباب"],
    "sports": ["sports", "sport", "رياضة", "الرياضة"],
    "tourisme": ["tourisme", "سياحة", "السياحة"],
    "énergie": ["énergie", "طاقة", "الطاقة"],
    "mines": ["mines", "مناجم", "المناجم"],
    "pêche": ["pêche", "صيد", "الصيد البحري"],
    "forêts": ["forêts", "forêt", "غابات", "الغابات"],
}
