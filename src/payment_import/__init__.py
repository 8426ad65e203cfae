# payment_import package
__version__ = "0.1.0"

from .config import SyncConfig
from .exceptions import (
    PaymentImportError,
    ConfigurationError,
    SyncError,
    FeedFetchError,
    MalformedRecordError,
    ConsistencyError,
    CheckpointError,
    TransactionError,
    BillingQueryError,
    PostingError,
    MatchError,
    NoMatchFound,
    AmbiguousMatchError,
)
from .models import (
    Transaction,
    Checkpoint,
    SyncWindow,
    MatchStrategy,
    MatchResult,
    PaymentPayload,
    SyncState,
    SyncStatus,
    SyncReport,
)
from .checkpoint import (
    CheckpointStore,
    FileCheckpointStore,
    SqlCheckpointStore,
    get_checkpoint_store,
)
from .feed import BankFeedBase, FioFeed, SimulatedFeed, get_bank_feed
from .billing import BillingClientBase, UcrmClient, SimulatedBilling, get_billing_client
from .sync import SyncService, ReportGenerator
