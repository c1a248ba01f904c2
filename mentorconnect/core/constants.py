"""Reference values for profile forms, directory filters and seed data"""

COURSES = [
    "B.Tech (Bachelor of Technology)",
    "MBA (Master of Business Administration)",
    "M.Tech (Master of Technology)",
    "B.Sc (Bachelor of Science)",
    "M.A. (Master of Arts)",
    "B.Com (Bachelor of Commerce)",
    "MBBS (Bachelor of Medicine, Bachelor of Surgery)",
    "PhD (Doctor of Philosophy)",
]

UNIVERSITIES_SAMPLE = [
    "Stanford University",
    "Massachusetts Institute of Technology (MIT)",
    "Harvard University",
    "University of California, Berkeley (UCB)",
    "University of Oxford",
    "California Institute of Technology (Caltech)",
    "University of Cambridge",
    "ETH Zurich (Swiss Federal Institute of Technology Zurich)",
    "National University of Singapore (NUS)",
    "Princeton University",
    "Yale University",
    "Imperial College London",
    "University of Chicago",
    "Tsinghua University",
    "Peking University",
]

SKILLS_AND_FIELDS = [
    "Web Development (Frontend)",
    "Web Development (Backend)",
    "Full-Stack Development",
    "Data Science",
    "Machine Learning",
    "Artificial Intelligence",
    "Cybersecurity",
    "Product Management",
    "Mobile App Development (iOS)",
    "Mobile App Development (Android)",
    "Cloud Computing (AWS)",
    "Cloud Computing (Azure)",
    "Cloud Computing (GCP)",
    "DevOps Engineering",
    "Blockchain Development",
    "UI/UX Design",
    "Game Development",
    "Internet of Things (IoT)",
    "Augmented Reality (AR) / Virtual Reality (VR)",
    "Digital Marketing",
    "Business Analysis",
    "Project Management",
    "Quantitative Finance",
    "Healthcare IT",
    "Robotics & Automation",
    "Biotechnology",
    "Supply Chain Management",
    "Human Resources",
    "Consulting",
    "Research & Development",
]
