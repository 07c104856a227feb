"""
Example demonstrating nested update expressions.

An update map mixes plain values (SET), None (REMOVE) and Update actions.
Nested maps are addressed with Update.map or with dotted keys.
"""

from pprint import pprint

from pydantic import BaseModel, Field

from dynexpr import UNDEFINED, Attr, DynamoSerializer, Update, UpdateExpression, build_params

print("Basic update:")
pprint(
    UpdateExpression.build_input(
        {
            "status": "active",
            "login_count": Update.inc(1),
            "legacy_field": None,
            "nickname": UNDEFINED,  # skipped entirely
        }
    )
)

print("\nLists and sets:")
pprint(
    UpdateExpression.build_input(
        {
            "history": Update.append(["signed_in"]),
            "recent": Update.prepend(["signed_in"]),
            "drafts": Update.del_indexes([0, 2]),
            "scores": Update.set_indexes({1: 99}),
            "tags": Update.add_to_set({"vip"}),
            "flags": Update.remove_from_set({"trial"}),
        }
    )
)

print("\nNested maps:")
pprint(
    UpdateExpression.build_input(
        {
            "profile": Update.map(
                {
                    "name": "Ann",
                    "address.city": "Rome",
                    "visits": Update.default(0),
                    "stats": Update.map({"total": Update.add("stats.base", 5)}),
                }
            ),
            "devices": Update.model_map({"phone": {"last_seen": "2024-01-01"}}),
        }
    )
)


class ProfilePatch(BaseModel):
    display_name: str | None = Field(default=None, alias="displayName")
    bio: str | None = None
    age: int | None = None


print("\nPydantic patch (only fields that were set):")
pprint(UpdateExpression.build_input(ProfilePatch(displayName="Ann", bio=None)))

print("\nOptimistic locking, low-level client format:")
pprint(
    build_params(
        update={"balance": Update.sub("balance", 12.5), "version": Update.inc(1)},
        condition=Attr("version") == 7,
        serializer=DynamoSerializer(),
    )
)
