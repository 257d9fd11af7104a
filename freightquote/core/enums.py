from enum import Enum


class EquipmentType(str, Enum):
    DRY_VAN = "dry_van"
    REEFER = "reefer"
    FLATBED = "flatbed"

    def __str__(self):
        return self.value


class LedgerOperation(str, Enum):
    LOAD = "load"
    INSERT = "insert"
    DELETE = "delete"

    def __str__(self):
        return self.value
