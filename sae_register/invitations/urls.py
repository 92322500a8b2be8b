INVITATIONS_URL = "/api/v1/invitations/{email}"
REGISTRATIONS_URL = "/api/v1/registrations"
SUBSTITUTIONS_URL = "/api/v1/substitutions"
