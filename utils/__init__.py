from .env import load_project_dotenv  # noqa: F401
from .logger import get_logger  # noqa: F401
from .strategy_cache import StrategyCache  # noqa: F401
