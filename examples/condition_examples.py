"""
Example demonstrating condition and filter expressions.

Conditions are compiled into ConditionExpression / FilterExpression strings
with every name and value aliased. The printed dicts can be passed straight
to a boto3 Table (resource) call.
"""

from pprint import pprint

from dynexpr import Attr, Condition, LogicalCondition, build_params

# Operator style
print("Adults with a verified email:")
pprint(Condition.build_input((Attr("age") >= 18) & Attr("email_verified").exists()))

# Builder style, comparing two attributes
print("\nOver budget:")
pprint(Condition.build_input(Condition.gt("spent", Condition.path("budget"))))

# Functions and nested paths
print("\nProfile checks:")
cond = (
    Attr("profile.emails[0]").begins_with("admin@")
    | Attr("roles").contains("owner")
    | (Attr("tags").size() > 10)
)
pprint(Condition.build_input(cond))

# Strict combinators refuse bad operand counts
print("\nStrict OR:")
pprint(Condition.build_input(LogicalCondition.or_(Attr("a") == 1, Attr("b") == 2)))

# Create-if-not-exists: several conditions are joined with AND
print("\nPutItem guard:")
pprint(build_params(condition=[Attr("pk").not_exists(), Attr("sk").not_exists()]))

# Filters on a scan
print("\nScan filter:")
pprint(
    build_params(
        filter_condition=[
            Attr("rating").between(8, 10),
            Attr("genre").is_in(["Drama", "Sci-Fi"]),
            ~Attr("archived").exists(),
        ]
    )
)
