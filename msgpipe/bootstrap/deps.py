import json
from functools import lru_cache

from pydantic import ValidationError

from msgpipe.bootstrap.config.settings import MsgPipeConfig
from msgpipe.core.ports.codec import Codec
from msgpipe.infra.json_codec import JsonCodec
from msgpipe.infra.msgpack_codec import MsgPackCodec

CODECS: dict[str, type[JsonCodec] | type[MsgPackCodec]] = {
    "json": JsonCodec,
    "msgpack": MsgPackCodec,
}


@lru_cache
def get_config() -> MsgPipeConfig:
    try:
        return MsgPipeConfig()
    except FileNotFoundError as ex:
        raise SystemExit(f"Provide a correct configuration file path: {ex}")
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))


def get_codec(config: MsgPipeConfig) -> Codec:
    try:
        factory = CODECS[config.codec]
    except KeyError:
        raise SystemExit(f"Unknown codec '{config.codec}', choose among: {', '.join(CODECS)}")
    return factory(config.codec_config())
