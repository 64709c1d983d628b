"""Value coercion and environment-backed settings shared by the bag and its filter rules."""
