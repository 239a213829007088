"""Message classes for the otpauth-migration export payload.

The classes are built from a descriptor at import time rather than from protoc
output. The schema they describe::

    message MigrationPayload {
      enum Algorithm {
        ALGORITHM_UNSPECIFIED = 0; SHA1 = 1; SHA256 = 2; SHA512 = 3; MD5 = 4;
      }
      enum DigitCount { DIGIT_COUNT_UNSPECIFIED = 0; SIX = 1; EIGHT = 2; SEVEN = 3; }
      enum OtpType { OTP_TYPE_UNSPECIFIED = 0; HOTP = 1; TOTP = 2; }

      message OtpParameters {
        bytes secret = 1;
        string name = 2;
        string issuer = 3;
        int32 algorithm = 4;
        int32 digits = 5;
        int32 type = 6;
        int64 counter = 7;
      }

      repeated OtpParameters otp_parameters = 1;
      int32 version = 2;
      int32 batch_size = 3;
      int32 batch_index = 4;
      int32 batch_id = 5;
    }

The code fields are declared as int32 so values outside the enums survive
parsing unchanged; the enums only supply named constants.
"""

from __future__ import annotations

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_PACKAGE = "totp_extractor.migration"

FieldProto = descriptor_pb2.FieldDescriptorProto


def _add_enum(
    message: descriptor_pb2.DescriptorProto, name: str, values: list[str]
) -> None:
    enum = message.enum_type.add(name=name)
    for number, value_name in enumerate(values):
        enum.value.add(name=value_name, number=number)


def _add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    label: int = FieldProto.LABEL_OPTIONAL,
    type_name: str = "",
) -> None:
    field = message.field.add(name=name, number=number, type=field_type, label=label)
    if type_name:
        field.type_name = type_name


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="totp_extractor/migration.proto", package=_PACKAGE, syntax="proto3"
    )
    payload = file_proto.message_type.add(name="MigrationPayload")
    _add_enum(
        payload,
        "Algorithm",
        ["ALGORITHM_UNSPECIFIED", "SHA1", "SHA256", "SHA512", "MD5"],
    )
    _add_enum(
        payload, "DigitCount", ["DIGIT_COUNT_UNSPECIFIED", "SIX", "EIGHT", "SEVEN"]
    )
    _add_enum(payload, "OtpType", ["OTP_TYPE_UNSPECIFIED", "HOTP", "TOTP"])

    otp = payload.nested_type.add(name="OtpParameters")
    _add_field(otp, "secret", 1, FieldProto.TYPE_BYTES)
    _add_field(otp, "name", 2, FieldProto.TYPE_STRING)
    _add_field(otp, "issuer", 3, FieldProto.TYPE_STRING)
    _add_field(otp, "algorithm", 4, FieldProto.TYPE_INT32)
    _add_field(otp, "digits", 5, FieldProto.TYPE_INT32)
    _add_field(otp, "type", 6, FieldProto.TYPE_INT32)
    _add_field(otp, "counter", 7, FieldProto.TYPE_INT64)

    _add_field(
        payload,
        "otp_parameters",
        1,
        FieldProto.TYPE_MESSAGE,
        label=FieldProto.LABEL_REPEATED,
        type_name=f".{_PACKAGE}.MigrationPayload.OtpParameters",
    )
    for number, name in enumerate(
        ["version", "batch_size", "batch_index", "batch_id"], start=2
    ):
        _add_field(payload, name, number, FieldProto.TYPE_INT32)
    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file().SerializeToString())

MigrationPayload = message_factory.GetMessageClass(
    _pool.FindMessageTypeByName(f"{_PACKAGE}.MigrationPayload")
)
