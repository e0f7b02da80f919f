from pydantic_settings import BaseSettings
from typing import List
import json


class Settings(BaseSettings):
    # Application
    app_name: str = "Tip Jar API"
    debug: bool = False
    api_v1_prefix: str = "/api/v1"

    # Solana Configuration
    solana_rpc_url: str = "https://api.devnet.solana.com"
    tip_program_id: str = "4K6LtuL5hK9FGADBNgiw5cXyk3RPPz3LeLwq7M8xUzUS"
    # Creator wallet that receives every tip
    recipient_address: str = "GsJYonU5Kz4MJBHZ5UFx9oyStBpXXswnZcFUorktj2yZ"
    namespace_tag: str = "tip_history"
    message_max_length: int = 200

    # Confirmation
    commitment: str = "confirmed"
    confirmation_timeout_seconds: float = 60.0

    # Tipper keypair (Base58 encoded), only used by the CLI wallet
    tipper_private_key: str = ""

    @property
    def namespace_seed(self) -> bytes:
        return self.namespace_tag.encode("utf-8")

    @property
    def network_label(self) -> str:
        """Human readable cluster name derived from the RPC endpoint."""
        url = self.solana_rpc_url
        if "devnet" in url:
            return "devnet"
        if "testnet" in url:
            return "testnet"
        if "localhost" in url or "127.0.0.1" in url:
            return "localnet"
        return "mainnet"

    # CORS
    cors_origins: str = '["http://localhost:3000","http://localhost:8080"]'

    @property
    def cors_origins_list(self) -> List[str]:
        return json.loads(self.cors_origins)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


settings = Settings()
