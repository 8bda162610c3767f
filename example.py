"""Example usage of the typed_models library."""

from typed_models import Collection, Schema

# Define models from a plain-data schema document
types = """
{
    "User": {
        "id": {"type": "int", "primary": true},
        "name": {"type": "text", "alias": "full_name"},
        "age": "int",
        "roles": "Role[]"
    },
    "Role": {
        "name": "text"
    }
}
"""

schema = Schema.parse(types)
User = schema.get_model("User")

people = [
    {"id": 1, "full_name": "Alice", "age": "30", "roles": [{"name": "admin"}]},
    {"id": 2, "name": "Bob", "age": 25},
    {"id": 3, "name": "Charlie", "age": 35, "roles": [{"name": "staff"}]},
    {"name": "Diana", "age": 28},
]

print("Creating User instances...")
users = Collection([User(data) for data in people], model_type=User)
for user in users:
    print(f"  Created: {user} (new: {user._is_new})")

print("\nUsers aged 30 and over:")
for user in users.find_all(lambda user, index: user.age >= 30):
    print(f"  {user.name}, age {user.age}")

# Track changes
bob = users.find({"name": "Bob"})
bob.age = 26
print(f"\nChanged Bob: dirty={bob._is_dirty}, previous={bob._previous_data}")

print("\n" + "=" * 60)
print("Exported data:")
for data in users.to_json():
    print(f"  {data}")
