from .assessment import Assessment
from .mark import Mark
from .remark import RemarkOverride, RemarkRule
from .scheme import ReportScheme, SchemeComponent
from .subject import Subject, SubjectPaper

__all__ = [
    "Assessment",
    "Mark",
    "RemarkOverride",
    "RemarkRule",
    "ReportScheme",
    "SchemeComponent",
    "Subject",
    "SubjectPaper",
]
