"""Configuration file schemas for the Marzneshin installer."""

SETTINGS_SCHEMA = {
    "type": "object",
    "properties": {
        "letsencrypt": {
            "type": "object",
            "properties": {
                "config_dir": {"type": "string", "minLength": 1},
                "dns_provider": {
                    "type": "string",
                    "pattern": r"^[a-z0-9]+$",
                    "description": "certbot DNS plugin name"
                },
                "credentials_file": {"type": "string", "minLength": 1},
                "email": {
                    "type": ["string", "null"],
                    "description": "Let's Encrypt registration email"
                },
                "staging": {"type": "boolean"}
            },
            "required": ["config_dir", "dns_provider", "credentials_file"],
            "additionalProperties": False
        },
        "distribution": {
            "type": "object",
            "properties": {
                "cert_filename": {"type": "string", "pattern": r"\.pem$"},
                "key_filename": {"type": "string", "pattern": r"\.pem$"},
                "directories": {
                    "type": "array",
                    "items": {"type": "string", "minLength": 1},
                    "minItems": 1
                },
                "primary_service_fragment": {"type": "string", "minLength": 1}
            },
            "required": ["cert_filename", "key_filename", "directories"],
            "additionalProperties": False
        },
        "panel": {
            "type": "object",
            "properties": {
                "command": {"type": "string", "minLength": 1},
                "env_file": {"type": "string", "minLength": 1},
                "installer_url": {"type": "string", "pattern": r"^https://"},
                "database": {
                    "type": "string",
                    "enum": ["sqlite", "mysql", "mariadb"]
                },
                "default_port": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": 65535
                },
                "default_dashboard_path": {"type": "string"}
            },
            "additionalProperties": False
        },
        "state_file": {"type": "string", "minLength": 1}
    },
    "required": ["letsencrypt", "distribution", "panel"],
    "additionalProperties": False
}

STATE_SCHEMA = {
    "type": "object",
    "properties": {
        "domains": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "include_wildcard": {"type": "boolean"}
                },
                "required": ["name", "include_wildcard"],
                "additionalProperties": False
            },
            "minItems": 1
        },
        "cert_filename": {"type": "string", "pattern": r"\.pem$"},
        "key_filename": {"type": "string", "pattern": r"\.pem$"},
        "directories": {
            "type": "array",
            "items": {"type": "string", "minLength": 1},
            "minItems": 1
        },
        "updated_at": {"type": "string"}
    },
    "required": ["domains", "cert_filename", "key_filename", "directories"],
    "additionalProperties": False
}
