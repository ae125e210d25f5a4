from typing import Annotated, Literal

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from msgpipe.bootstrap.config.loader import get_configfile
from msgpipe.core.models.config import CodecConfig, ServerConfig


class MsgPipeConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MSGPIPE_",
        extra="ignore"
    )

    codec: Annotated[
        Literal["json", "msgpack"],
        Field(
            description=(
                "Wire encoding of the messages exchanged on the streams.\n"
                "'json' reads whitespace separated JSON objects and writes one\n"
                "object per line. 'msgpack' reads and writes consecutive maps."
            ),
            default="json"
        )
    ]

    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        Field(
            description="Logging verbosity. Logs are written to stderr.",
            default="INFO"
        )
    ]

    max_decode_errors: Annotated[
        int,
        Field(
            description=(
                "Number of consecutive malformed messages after which the server\n"
                "stops reading its input. 0 disables the limit."
            ),
            default=16,
            ge=0
        )
    ]

    read_chunk_size: Annotated[
        int,
        Field(
            description="Maximum number of bytes requested per read on the input stream.",
            default=64 * 1024,
            gt=0
        )
    ]

    max_buffer_size: Annotated[
        int,
        Field(
            description="Maximum size of a single undecoded message kept in memory.",
            default=4 * 1024 * 1024,
            gt=0
        )
    ]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: tuple[PydanticBaseSettingsSource, ...] = (init_settings, env_settings)
        if (config_file := get_configfile()) is not None:
            sources += (YamlConfigSettingsSource(settings_cls, yaml_file=config_file),)
        return sources

    def server_config(self) -> ServerConfig:
        return ServerConfig(max_decode_errors=self.max_decode_errors)

    def codec_config(self) -> CodecConfig:
        return CodecConfig(
            read_chunk_size=self.read_chunk_size,
            max_buffer_size=self.max_buffer_size,
        )
