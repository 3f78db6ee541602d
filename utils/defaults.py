from models.content_model import About, AcademicDetails, Hero, SocialLinks

# Shown on the public page while the hero/about documents do not exist yet

DEFAULT_HERO = Hero(
    name="Nelavalli Phanindra",
    subtitle="Building real-world tech for real-world impact.",
    description=(
        "Computer Science Engineering student passionate about AI, ML, "
        "and mobile development. Turning innovative ideas into impactful solutions."
    ),
    image_url="https://avatars.githubusercontent.com/u/157562857?v=4",
    resume_url="/resume.pdf",
    social_links=SocialLinks(
        github="https://github.com/Phanindra-Nelavalli",
        linkedin="https://linkedin.com/in/Nelavalli-Phanindra",
        email="nelavalliphanindra4@gmail.com",
    ),
    cgpa="9.42",
    pos_x=50,
    pos_y=50,
    zoom=1,
)

DEFAULT_ABOUT = About(
    title="About Me",
    subtitle="Computer Science Engineering student",
    description=(
        "I'm an enthusiastic Computer Science Engineering student with a solid understanding of "
        "software development, web, and mobile application development. My passion lies in "
        "exploring new technologies, especially Machine Learning (ML) and Artificial Intelligence (AI)."
    ),
    academic_details=AcademicDetails(
        btech="B.Tech in Computer Science, Vishnu Institute of Technology",
    ),
)
