"""
Example demonstrating key conditions for Query.

A key map holds the partition key value and, optionally, a sort key clause.
"""

from pprint import pprint

from dynexpr import Attr, KeyCondition, build_params

print("Partition key only:")
pprint(KeyCondition.build_input({"pk": "USER#42"}))

print("\nSort key prefix:")
pprint(KeyCondition.build_input({"pk": "USER#42", "sk": KeyCondition.begins_with("ORDER#")}))

print("\nSort key range with a filter:")
pprint(
    build_params(
        key={"pk": "USER#42", "sk": KeyCondition.between("ORDER#2024-01", "ORDER#2024-12")},
        filter_condition=Attr("total") >= 100,
    )
)
