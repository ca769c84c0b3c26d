from tintix.models.film import Film, FilmInventory
from tintix.models.installer_time_entry import InstallerTimeEntry
from tintix.models.inventory_transaction import InventoryTransaction
from tintix.models.job_dimension import JobDimension
from tintix.models.job_entry import JobEntry
from tintix.models.job_installer import JobInstaller
from tintix.models.redo_entry import RedoEntry, RedoPart
from tintix.models.user import User

__all__ = [
    "Film",
    "FilmInventory",
    "InstallerTimeEntry",
    "InventoryTransaction",
    "JobDimension",
    "JobEntry",
    "JobInstaller",
    "RedoEntry",
    "RedoPart",
    "User",
]
