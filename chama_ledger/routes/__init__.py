# Blueprints for the JSON API
