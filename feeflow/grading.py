"""Grade cutoffs shared by every SBA call site"""
import math

GRADE_BOUNDARIES = (
    (80, 'A'),
    (70, 'B'),
    (60, 'C'),
    (50, 'D'),
    (40, 'E'),
)
FAIL_GRADE = 'F'


def percentage(score, total_marks):
    """Whole-number percentage, halves rounded up"""
    if not total_marks:
        return 0
    return math.floor(score * 100 / total_marks + 0.5)


def grade_for(percent):
    for cutoff, grade in GRADE_BOUNDARIES:
        if percent >= cutoff:
            return grade
    return FAIL_GRADE
