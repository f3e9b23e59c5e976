"""Assemble a Provision (identity plus optional credential) from arguments."""

from __future__ import annotations

from typing import Any

from lowpanctl.core.args import ArgStream, decode_hex, decode_int
from lowpanctl.core.errors import CredentialRequired, UnrecognizedArgument
from lowpanctl.core.model import Credential, Identity, MasterKey, Provision


def build_provision(args: ArgStream, *, credential_required: bool) -> Provision:
    """Consume the rest of ``args`` and return the Provision it describes.

    Flags:

    - ``--name NAME`` sets the network name
    - ``-p/--panid N`` sets the PAN ID
    - ``-c/--channel N`` sets the channel
    - ``-x/--xpanid HEX`` sets the extended PAN ID
    - ``-k/--master-key HEX`` supplies a master key
    - ``--master-key-index N`` selects the key index (0 keeps the default)

    A single bare token is taken as the network name. Any other option, or
    a bare token once a name is set, raises UnrecognizedArgument.
    """
    identity: dict[str, Any] = {}
    master_key: bytes | None = None
    master_key_index = 0
    has_name = False

    for arg in args:
        if arg == "--name":
            identity["name"] = args.next_arg_required(arg)
            has_name = True
        elif arg in ("-p", "--panid"):
            identity["panid"] = decode_int(args.next_arg_required(arg), context="PAN ID")
        elif arg in ("-c", "--channel"):
            identity["channel"] = decode_int(args.next_arg_required(arg), context="channel")
        elif arg in ("-x", "--xpanid"):
            identity["xpanid"] = decode_hex(args.next_arg_required(arg), context="extended PAN ID")
        elif arg in ("-k", "--master-key"):
            master_key = decode_hex(args.next_arg_required(arg), context="master key")
        elif arg == "--master-key-index":
            master_key_index = decode_int(args.next_arg_required(arg), context="master key index")
        elif arg.startswith("-") or has_name:
            raise UnrecognizedArgument(arg)
        else:
            identity["name"] = arg
            has_name = True

    credential: Credential | None = None
    if master_key is not None:
        if master_key_index == 0:
            credential = MasterKey(master_key)
        else:
            credential = MasterKey(master_key, master_key_index)

    if credential is None and credential_required:
        raise CredentialRequired()

    return Provision(identity=Identity(**identity), credential=credential)
