from enum import Enum


class Visibility(str, Enum):
    public = "PUBLIC"
    unlisted = "UNLISTED"
    private = "PRIVATE"
