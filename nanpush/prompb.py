"""
Remote-write wire schema.

The message classes mirror prometheus/prompb (types.proto, remote.proto),
restricted to the fields a plain sample push needs:

    message WriteRequest { repeated TimeSeries timeseries = 1; }
    message TimeSeries   { repeated Label labels = 1; repeated Sample samples = 2; }
    message Label        { string name = 1; string value = 2; }
    message Sample       { double value = 1; int64 timestamp = 2; }

They are built from a FileDescriptorProto at import time so no generated
_pb2 module has to be kept in sync.
"""
import snappy
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError, EncodeError as ProtoEncodeError

from .errors import EncodeError

PACKAGE = "prometheus"

_F = descriptor_pb2.FieldDescriptorProto


def _add_message(file_proto, name, fields):
    msg = file_proto.message_type.add(name=name)
    for number, (field_name, field_type, label, type_name) in enumerate(fields, start=1):
        field = msg.field.add(name=field_name, number=number, type=field_type, label=label)
        if type_name:
            field.type_name = f".{PACKAGE}.{type_name}"


def _build_file():
    fp = descriptor_pb2.FileDescriptorProto(
        name="nanpush/remote.proto", package=PACKAGE, syntax="proto3"
    )
    _add_message(fp, "Label", [
        ("name", _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
        ("value", _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
    ])
    _add_message(fp, "Sample", [
        ("value", _F.TYPE_DOUBLE, _F.LABEL_OPTIONAL, None),
        ("timestamp", _F.TYPE_INT64, _F.LABEL_OPTIONAL, None),
    ])
    _add_message(fp, "TimeSeries", [
        ("labels", _F.TYPE_MESSAGE, _F.LABEL_REPEATED, "Label"),
        ("samples", _F.TYPE_MESSAGE, _F.LABEL_REPEATED, "Sample"),
    ])
    _add_message(fp, "WriteRequest", [
        ("timeseries", _F.TYPE_MESSAGE, _F.LABEL_REPEATED, "TimeSeries"),
    ])
    return fp


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file().SerializeToString())


def _message_class(name):
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PACKAGE}.{name}"))


WriteRequest = _message_class("WriteRequest")


def encode(request) -> bytes:
    """Serialize a WriteRequest and snappy-compress it (block format)."""
    try:
        data = request.SerializeToString()
    except ProtoEncodeError as e:
        raise EncodeError(f"error marshalling write request: {e}") from e
    return snappy.compress(data)


def decode(payload: bytes):
    try:
        data = snappy.uncompress(payload)
    except snappy.UncompressError as e:
        raise EncodeError(f"error decompressing write request: {e}") from e
    try:
        return WriteRequest.FromString(data)
    except DecodeError as e:
        raise EncodeError(f"error unmarshalling write request: {e}") from e
