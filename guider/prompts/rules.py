"""Guard rule tables.

Each table is ordered; rule ids are stable and used in audit logs.
Fragments cover Indonesian and English phrasing.
"""

import re
from dataclasses import dataclass
from enum import Enum


class RuleCategory(str, Enum):
    """Which guard table a rule belongs to."""

    DATA_ACCESS = "data_access"
    PROMPT_INJECTION = "prompt_injection"
    ROLE_DEVIATION = "role_deviation"


@dataclass(frozen=True)
class GuardRule:
    """A single case-insensitive matcher.

    Attributes:
        id: Stable identifier reported in verdicts.
        pattern: Compiled regular expression.
        category: Table the rule belongs to.
    """

    id: str
    pattern: re.Pattern[str]
    category: RuleCategory

    @classmethod
    def compile(cls, rule_id: str, regex: str, category: RuleCategory) -> "GuardRule":
        """Build a rule from a regex source, always case-insensitive."""
        return cls(id=rule_id, pattern=re.compile(regex, re.IGNORECASE), category=category)

    def matches(self, text: str) -> bool:
        """Check whether the rule matches anywhere in text."""
        return self.pattern.search(text) is not None


def _table(category: RuleCategory, entries: list[tuple[str, str]]) -> tuple[GuardRule, ...]:
    prefix = category.value
    return tuple(
        GuardRule.compile(f"{prefix}.{name}", regex, category) for name, regex in entries
    )


DATA_ACCESS_RULES = _table(
    RuleCategory.DATA_ACCESS,
    [
        ("kirim_data", r"kirim.*data"),
        ("send_data", r"send.*data"),
        ("berikan_data", r"berikan.*data"),
        ("share_data", r"share.*data"),
        ("export_data", r"export.*data"),
        ("download_data", r"download.*data"),
        ("akses_database", r"akses.*database"),
        ("access_database", r"access.*database"),
        ("lihat_database", r"lihat.*database"),
        ("tampilkan_semua_data", r"tampilkan.*semua.*data"),
        ("show_all_data", r"show.*all.*data"),
        ("bagikan_informasi", r"bagikan.*informasi"),
        ("transfer_data", r"transfer.*data"),
        ("copy_data", r"copy.*data"),
        ("salin_data", r"salin.*data"),
    ],
)

PROMPT_INJECTION_RULES = _table(
    RuleCategory.PROMPT_INJECTION,
    [
        ("lupakan_instruksi", r"lupakan.*instruksi"),
        ("abaikan_instruksi", r"abaikan.*instruksi"),
        ("ignore_instruction", r"ignore.*instruction"),
        ("forget_instruction", r"forget.*instruction"),
        ("new_instruction", r"new.*instruction"),
        ("instruksi_baru", r"instruksi.*baru"),
        ("sistem_baru", r"sistem.*baru"),
        ("new_system", r"new.*system"),
        ("reset_instruction", r"reset.*instruction"),
        ("override_instruction", r"override.*instruction"),
        ("jadi_sekarang_kamu", r"jadi.*sekarang.*kamu"),
        ("sekarang_kamu_adalah", r"sekarang.*kamu.*adalah"),
        ("act_as", r"\bact\s+as\b"),
        ("berperan_sebagai", r"berperan.*sebagai"),
        ("pretend_to_be", r"pretend.*to.*be"),
        ("pura_pura_jadi", r"pura.*pura.*jadi"),
        ("resep_masak", r"resep.*masak"),
        ("recipe", r"\brecipes?\b"),
        ("masak_ayam", r"masak.*ayam"),
        ("cooking", r"\bcooking\b"),
        ("bermain_peran", r"bermain.*peran"),
        ("roleplay", r"\brole-?play"),
    ],
)

ROLE_DEVIATION_RULES = _table(
    RuleCategory.ROLE_DEVIATION,
    [
        ("mari_kita_analisis", r"mari kita.*analisis"),
        ("saya_perlu_mengetahui", r"saya perlu.*mengetahui"),
        ("bisakah_ceritakan_tentang", r"bisakah.*ceritakan.*tentang"),
        ("untuk_analisis_lebih", r"untuk.*analisis.*lebih"),
        ("jawab_pertanyaan_berikut", r"jawab.*pertanyaan.*berikut"),
        ("tes_kepribadian", r"tes.*kepribadian"),
        ("assessment_tambahan", r"assessment.*tambahan"),
        ("analisis_ulang", r"analisis.*ulang"),
        ("interpretasi_baru", r"interpretasi.*baru"),
        ("coba_jawab_ini", r"coba.*jawab.*ini"),
        ("mari_kita_tes", r"mari.*kita.*tes"),
        ("perlu_informasi_lebih", r"perlu.*informasi.*lebih"),
    ],
)

# Question-type detection, used only to annotate audit logs.
TOPIC_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    (
        "archetype",
        re.compile(
            r"apa archetype|archetype saya|tipe kepribadian|personality type"
            r"|kepribadian saya|karakter saya",
            re.IGNORECASE,
        ),
    ),
    ("strength", re.compile(r"kekuatan|strength|kelebihan|keunggulan", re.IGNORECASE)),
    ("weakness", re.compile(r"kelemahan|weakness|kekurangan", re.IGNORECASE)),
    ("career", re.compile(r"karir|career|pekerjaan|profesi|rekomendasi", re.IGNORECASE)),
    ("personality", re.compile(r"kepribadian|personality|sifat|karakter", re.IGNORECASE)),
)
