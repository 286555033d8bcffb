# Schemas package
from .book import BookBase, BookCreate, BookUpdate, BookResponse, BookListResponse, StockAdjustment
from .borrowing import BorrowingCreate, BorrowingUpdate, BorrowingResponse, BorrowingListResponse
from .inventory import (
    InventoryItemBase, InventoryItemCreate, InventoryItemUpdate,
    InventoryItemResponse, InventoryListResponse
)
from .report import (
    MonthlyStat, CategoryStat, PopularBook, PopularBooksReport,
    OverdueMonth, OverdueReport, MostPopular, SummaryStats, DashboardStats
)
