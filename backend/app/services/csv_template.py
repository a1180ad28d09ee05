"""
CSV template offered to staff before a bulk upload.

The header matches the import column contract exactly and every example row
imports cleanly, so the file can be uploaded back unchanged.
"""

import csv
import io

TEMPLATE_VERSION = "1"
TEMPLATE_FILENAME = "problem-statements-template.csv"

TEMPLATE_COLUMNS = [
    "title", "abstract", "domain", "category", "difficulty", "duration",
    "technologies", "deliverables", "prerequisites", "learningOutcomes",
    "tags", "status", "featured",
]

TEMPLATE_ROWS = [
    [
        "AI-Powered Personal Finance Manager",
        "Develop an intelligent personal finance management system that uses machine learning algorithms "
        "to analyze user spending patterns and provide personalized financial advice. The system will include "
        "features like budget tracking, expense categorization, investment recommendations, and financial goal setting.",
        "AI & Machine Learning", "Major", "Advanced", "12-16 weeks",
        "Python;TensorFlow;React;Node.js;MongoDB",
        "Complete source code;User interface;Documentation;Deployment guide",
        "Strong programming skills;Basic ML knowledge;Web development experience",
        "Implement ML algorithms;Design responsive web applications;Work with financial APIs",
        "Machine Learning;Finance;Web Development;Data Analysis",
        "Draft", "false",
    ],
    [
        "IoT Smart Home System",
        "Create a comprehensive IoT-based smart home automation system that allows users to control various "
        "home appliances and monitor environmental conditions remotely. The system will include sensors for "
        "temperature, humidity, motion detection, and smart switches for controlling lights and fans.",
        "IoT & Embedded Systems", "Major", "Intermediate", "10-14 weeks",
        "Arduino;Raspberry Pi;Python;MQTT;React Native",
        "Hardware prototype;Mobile app;Documentation;Circuit diagrams",
        "Electronics basics;Programming skills;IoT concepts",
        "Work with IoT devices;Develop mobile applications;Understand sensor integration",
        "IoT;Smart Home;Automation;Mobile Development",
        "Draft", "false",
    ],
    [
        "Blockchain-Based Supply Chain Tracking",
        "Implement a blockchain solution for tracking products throughout the supply chain, ensuring "
        "transparency and authenticity. The system will allow consumers to verify product origins and track "
        "the journey from manufacturer to retailer.",
        "Cybersecurity & Blockchain", "Major", "Advanced", "14-18 weeks",
        "Solidity;Web3.js;React;Node.js;IPFS",
        "Smart contracts;Web application;Documentation;Test cases",
        "Blockchain fundamentals;Smart contract development;Web3 technologies",
        "Develop smart contracts;Build decentralized applications;Understand supply chain processes",
        "Blockchain;Supply Chain;Web3;Smart Contracts",
        "Draft", "false",
    ],
    [
        "Cloud-Based E-Learning Platform",
        "Build a scalable e-learning platform using cloud technologies that supports video streaming, "
        "real-time collaboration, and progress tracking. The platform will include features like course "
        "creation, student enrollment, assignment submission, and performance analytics.",
        "Cloud Computing", "Major", "Intermediate", "12-16 weeks",
        "AWS;React;Node.js;MongoDB;Docker",
        "Cloud deployment;Web application;API documentation;Database schema",
        "Cloud computing basics;Web development;Database design",
        "Deploy applications to cloud;Implement real-time features;Design scalable architectures",
        "Cloud Computing;E-Learning;Real-time Applications;Scalability",
        "Draft", "false",
    ],
    [
        "Cybersecurity Threat Detection System",
        "Develop an AI-powered cybersecurity system that monitors network traffic and detects potential "
        "threats in real-time. The system will use machine learning algorithms to identify suspicious "
        "patterns and alert administrators about potential security breaches.",
        "Cybersecurity & Blockchain", "Major", "Advanced", "16-20 weeks",
        "Python;TensorFlow;Kafka;Elasticsearch;React",
        "Threat detection engine;Dashboard;Documentation;Test datasets",
        "Cybersecurity knowledge;Machine learning;Network protocols",
        "Implement ML-based threat detection;Build monitoring dashboards;Understand network security",
        "Cybersecurity;Machine Learning;Network Security;Real-time Processing",
        "Draft", "false",
    ],
]


def render_template() -> str:
    """Header plus example rows; data cells quoted, no trailing newline"""
    buffer = io.StringIO()
    buffer.write(",".join(TEMPLATE_COLUMNS) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(TEMPLATE_ROWS)
    return buffer.getvalue().rstrip("\n")


PROBLEM_TEMPLATE_CSV = render_template()


def download_template() -> bytes:
    """The versioned template document as UTF-8 bytes"""
    return PROBLEM_TEMPLATE_CSV.encode("utf-8")
