from medflow.schemas.patient import Gender, PatientBase

SAMPLE_PATIENTS = [
    PatientBase(name="John Smith", age=45, gender=Gender.MALE,
                diagnosis="Hypertension", prescription="Lisinopril 10mg daily"),
    PatientBase(name="Sarah Johnson", age=32, gender=Gender.FEMALE,
                diagnosis="Type 2 Diabetes", prescription="Metformin 500mg twice daily"),
    PatientBase(name="Michael Brown", age=28, gender=Gender.MALE,
                diagnosis="Asthma", prescription="Albuterol inhaler as needed"),
    PatientBase(name="Emily Davis", age=55, gender=Gender.FEMALE,
                diagnosis="Osteoarthritis", prescription="Ibuprofen 400mg three times daily"),
    PatientBase(name="David Wilson", age=41, gender=Gender.MALE,
                diagnosis="Depression", prescription="Sertraline 50mg daily"),
]
