"""BibTeX field names and entry types known to the entry model."""

from enum import Enum, unique

# Standard BibTeX fields from TameTheBeast manual
STANDARD_FIELDS = {
    "address",
    "author",
    "booktitle",
    "chapter",
    "crossref",
    "edition",
    "editor",
    "howpublished",
    "institution",
    "journal",
    "month",
    "note",
    "number",
    "organization",
    "pages",
    "publisher",
    "school",
    "series",
    "title",
    "volume",
    "year",
}

# Modern extensions
MODERN_FIELDS = {
    "doi",
    "url",
    "isbn",
    "issn",
    "keywords",
    "abstract",
    "eprint",
    "urldate",
}

ALL_FIELDS = STANDARD_FIELDS | MODERN_FIELDS


@unique
class EntryType(Enum):
    """BibTeX entry types.

    Unknown types decode to MISC so that a single unusual entry never
    makes a whole bibliography file unreadable.
    """

    ARTICLE = "article"
    BOOK = "book"
    BOOKLET = "booklet"
    INBOOK = "inbook"
    INCOLLECTION = "incollection"
    INPROCEEDINGS = "inproceedings"
    CONFERENCE = "conference"  # Alias for inproceedings
    MANUAL = "manual"
    MASTERSTHESIS = "mastersthesis"
    MISC = "misc"
    PHDTHESIS = "phdthesis"
    PROCEEDINGS = "proceedings"
    TECHREPORT = "techreport"
    UNPUBLISHED = "unpublished"

    # Modern types
    ONLINE = "online"
    ELECTRONIC = "electronic"
    PATENT = "patent"
    SOFTWARE = "software"
    DATASET = "dataset"
    THESIS = "thesis"  # Generic thesis type
    REPORT = "report"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return cls.MISC
