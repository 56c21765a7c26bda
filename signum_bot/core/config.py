from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

NAME = "Signum Explorer Bot"
VERSION = "v1.0.0"

COMMAND_START = "/start"
COMMAND_ADD = "/add"
COMMAND_DEL = "/del"
COMMAND_PRICE = "/price"
COMMAND_CALC = "/calc"
COMMAND_INFO = "/info"

BUTTON_PRICES = "💵 Prices"
BUTTON_CALC = "🧮 Calc"
BUTTON_INFO = "ℹ Info"

INSTRUCTION_TEXT = (
    "\nSend an account (<code>S-XXXX-XXXX-XXXX-XXXXX</code> or numeric id) to look it up.\n\n"
    f"<code>{COMMAND_ADD} S-XXXX-XXXX-XXXX-XXXXX</code> track an account\n"
    f"<code>{COMMAND_DEL} S-XXXX-XXXX-XXXX-XXXXX</code> stop tracking it\n"
    f"<code>{COMMAND_PRICE}</code> actual SIGNA prices\n"
    f"<code>{COMMAND_CALC} 100 5000</code> mining reward for 100 TiB and 5000 SIGNA commitment\n"
    f"<code>{COMMAND_INFO}</code> about this bot\n"
)
AUTHOR_TEXT = "\nSource code and issues: https://github.com/xDWart/signum-explorer-bot\n"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True)

    app_name: str = "signum-explorer-bot"
    env: str = "dev"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8000

    telegram_bot_token: str = Field(default="", alias="TELEGRAM_BOT_TOKEN")
    telegram_poll_timeout_sec: int = 30
    telegram_use_webhook: bool = Field(default=False, alias="TELEGRAM_USE_WEBHOOK")
    telegram_webhook_url: str = ""
    telegram_webhook_path: str = "/telegram/webhook"
    telegram_webhook_secret: str = ""

    database_url: str = Field(default="sqlite+aiosqlite:///./signum_bot.db", alias="DATABASE_URL")

    signum_hosts: str = Field(
        default=(
            "https://europe1.signum.network;"
            "https://europe.signum.network;"
            "https://canada.signum.network;"
            "https://australia.signum.network;"
            "https://europe2.signum.network;"
            "https://europe3.signum.network;"
            "https://brazil.signum.network;"
            "https://uk.signum.network;"
            "https://wallet.burstcoin.ro"
        ),
        alias="SIGNUM_HOSTS",
    )
    signum_request_timeout_sec: float = 10.0
    signum_default_avg_commit: float = 2500.0
    signum_default_base_target: float = 280000.0
    signum_default_block_reward: float = 134.0
    notifier_period_min: int = Field(default=5, alias="NOTIFIER_PERIOD_MIN")

    cmc_api_key: str = Field(default="", alias="CMC_API_KEY")
    cmc_base_url: str = "https://pro-api.coinmarketcap.com/v1"
    price_refresh_min: int = Field(default=5, alias="PRICE_REFRESH_MIN")

    max_num_of_accounts: int = Field(default=6, alias="MAX_NUM_OF_ACCOUNTS")
    calc_reinvest_every_days: int = Field(default=7, alias="CALC_REINVEST_EVERY_DAYS")

    # operator wallet used by the faucet callback; empty disables the faucet
    faucet_secret_phrase: str = Field(default="", alias="FAUCET_SECRET_PHRASE")
    faucet_amount_nqt: float = 10_000_000.0
    faucet_fee_nqt: float = 735_000.0

    listener_concurrent_updates: bool = Field(default=False, alias="LISTENER_CONCURRENT_UPDATES")
    listener_queue_size: int = 1000

    def signum_hosts_list(self) -> List[str]:
        return [x.strip().rstrip("/") for x in self.signum_hosts.split(";") if x.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
