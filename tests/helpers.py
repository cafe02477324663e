PASSWORD = "Secret1!"

FULL_PROFILE = {
    "personalInfo": {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "dateOfBirth": "1990-05-17",
        "bloodType": "O+",
    },
    "medicalInfo": {
        "allergies": ["Penicillin"],
        "conditions": ["Asthma"],
        "medications": ["Salbutamol"],
    },
    "emergencyContact": {
        "name": "Charles Babbage",
        "phone": "+44 20 7946 0000",
        "relationship": "Friend",
    },
}


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
