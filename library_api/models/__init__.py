# Models package
from .book import Book
from .borrowing import Borrowing, BorrowingStatus
from .inventory import InventoryItem, ItemCondition
