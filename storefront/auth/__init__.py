# Auth module
