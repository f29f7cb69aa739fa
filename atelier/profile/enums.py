"""Enums for the profile domain."""

from enum import Enum


class Gender(str, Enum):
    """Gender used to tailor styling advice."""

    MALE = "male"
    FEMALE = "female"


class AgeGroup(str, Enum):
    """Age bracket used to tailor styling advice."""

    AGE_13_17 = "13-17"
    AGE_18_25 = "18-25"
    AGE_26_35 = "26-35"
    AGE_36_45 = "36-45"
    AGE_46_55 = "46-55"
    AGE_55_PLUS = "55+"


class ProfileField(str, Enum):
    """Profile attributes a generator may require before it can run."""

    GENDER = "gender"
    AGE_GROUP = "age_group"
